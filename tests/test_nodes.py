from __future__ import annotations

import os
from unittest.mock import patch

from langgraph.graph import END

from pipeline.errors import CollectError, FetchError, RecognizerError
from pipeline.graph import stop_on_error
from pipeline.nodes import node_allocate, node_collect, node_fetch, node_recognize
from pipeline.settings import Settings


def base_state(**kw):
    state = {
        "image_urls": ["http://img/a.jpg"],
        "job_id": "abcd1234",
        "input_dir": "/input/abcd1234",
        "output_dir": "/output/abcd1234",
        "downloaded": None,
        "results": None,
        "error": None,
        "status_code": None,
    }
    state.update(kw)
    return state


def test_allocate_creates_input_dir(tmp_path):
    settings = Settings(input_dir=str(tmp_path / "in"), output_dir=str(tmp_path / "out"))
    settings.ensure_dirs()

    result = node_allocate({"image_urls": ["x"]}, settings)

    assert result["error"] is None
    assert os.path.isdir(result["input_dir"])
    assert result["output_dir"] == os.path.join(settings.output_dir, result["job_id"])
    assert not os.path.exists(result["output_dir"])


def test_allocate_missing_root(tmp_path):
    settings = Settings(input_dir=str(tmp_path / "missing"), output_dir=str(tmp_path / "out"))

    result = node_allocate({"image_urls": ["x"]}, settings)

    assert result["status_code"] == 500
    assert result["error"].startswith("could not create input dir")


@patch("pipeline.nodes.fetch_image")
def test_fetch_numbers_files(mock_tool):
    state = base_state(image_urls=["http://a", "http://b"])
    result = node_fetch(state, Settings())

    assert result.get("error") is None
    assert result["downloaded"] == [
        os.path.join("/input/abcd1234", "0.jpg"),
        os.path.join("/input/abcd1234", "1.jpg"),
    ]
    first = mock_tool.invoke.call_args_list[0].args[0]
    assert first["url"] == "http://a"
    assert first["verify_tls"] is True


@patch("pipeline.nodes.fetch_image")
def test_fetch_insecure_flag(mock_tool):
    node_fetch(base_state(), Settings(insecure_skip_verify=True))
    assert mock_tool.invoke.call_args.args[0]["verify_tls"] is False


@patch("pipeline.nodes.fetch_image")
def test_fetch_status_check_off_by_default(mock_tool):
    node_fetch(base_state(), Settings())
    assert mock_tool.invoke.call_args.args[0]["check_status"] is False

    node_fetch(base_state(), Settings(fetch_check_status=True))
    assert mock_tool.invoke.call_args.args[0]["check_status"] is True


@patch("pipeline.nodes.fetch_image")
def test_fetch_stops_at_first_failure(mock_tool):
    mock_tool.invoke.side_effect = [None, FetchError("could not wget image: boom"), None]
    state = base_state(image_urls=["http://a", "http://b", "http://c"])

    result = node_fetch(state, Settings())

    assert result["error"] == "could not wget image: boom"
    assert result["status_code"] == 500
    assert len(result["downloaded"]) == 1
    assert mock_tool.invoke.call_count == 2


@patch("pipeline.nodes.submit_job")
def test_recognize_ok(mock_tool):
    mock_tool.invoke.return_value = 200
    result = node_recognize(base_state(), Settings(recognizer_url="http://rec:9000"))

    assert result == {}
    args = mock_tool.invoke.call_args.args[0]
    assert args["url"] == "http://rec:9000"
    assert args["input_dir"] == "/input/abcd1234"
    assert args["output_dir"] == "/output/abcd1234"


@patch("pipeline.nodes.submit_job")
def test_recognize_propagates_status(mock_tool):
    mock_tool.invoke.side_effect = RecognizerError("darkflow returned error", status_code=503)
    result = node_recognize(base_state(), Settings())

    assert result["status_code"] == 503
    assert result["error"] == "darkflow returned error"


@patch("pipeline.nodes.list_outputs")
def test_collect_results(mock_tool):
    mock_tool.invoke.return_value = ["/output/abcd1234/0.jpg"]
    result = node_collect(base_state(), Settings())

    assert result["results"] == ["/output/abcd1234/0.jpg"]
    assert mock_tool.invoke.call_args.args[0]["job_id"] == "abcd1234"


@patch("pipeline.nodes.list_outputs")
def test_collect_missing_dir(mock_tool):
    mock_tool.invoke.side_effect = CollectError("could not read output dir: nope")
    result = node_collect(base_state(), Settings())

    assert result["status_code"] == 500
    assert "results" not in result


def test_router_stops_on_error():
    route = stop_on_error("fetch")
    assert route(base_state()) == "fetch"
    assert route(base_state(error="boom")) == END
