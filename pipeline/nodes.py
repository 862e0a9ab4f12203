from __future__ import annotations

import logging
import os
from typing import Any, Dict

from pipeline.errors import PipelineError
from pipeline.jobs import allocate_job
from pipeline.settings import Settings
from pipeline.state import RecognizeState
from pipeline.tools import fetch_image, list_outputs, submit_job

log = logging.getLogger(__name__)


def _failed(tag: str, err: PipelineError) -> Dict[str, Any]:
    log.error("[%s] %s", tag, err.reason)
    return {"error": err.reason, "status_code": err.status_code}


def node_allocate(state: RecognizeState, settings: Settings) -> Dict[str, Any]:
    """Creates the job input directory and computes the output directory."""
    try:
        job = allocate_job(settings.input_dir, settings.output_dir)
    except PipelineError as e:
        return _failed("JOB", e)

    log.info("[JOB] %s input=%s output=%s", job.id, job.input_dir, job.output_dir)
    return {
        "job_id": job.id,
        "input_dir": job.input_dir,
        "output_dir": job.output_dir,
        "error": None,
    }


def node_fetch(state: RecognizeState, settings: Settings) -> Dict[str, Any]:
    """
    Downloads every image, one at a time, as `0.jpg`, `1.jpg`, ...

    Stops at the first failure; files already written stay on disk.
    """
    urls = state.get("image_urls") or []
    log.info("[FETCH] %d images for job %s", len(urls), state.get("job_id"))

    downloaded = []
    for i, url in enumerate(urls):
        dest = os.path.join(state["input_dir"], f"{i}.jpg")
        try:
            fetch_image.invoke(
                {
                    "url": url,
                    "dest": dest,
                    "verify_tls": not settings.insecure_skip_verify,
                    "timeout": settings.fetch_timeout,
                    "check_status": settings.fetch_check_status,
                }
            )
        except PipelineError as e:
            return {**_failed("FETCH", e), "downloaded": downloaded}
        downloaded.append(dest)

    return {"downloaded": downloaded}


def node_recognize(state: RecognizeState, settings: Settings) -> Dict[str, Any]:
    """Node wrapper around the recognition service call."""
    log.info("[RECOGNIZE] POST %s job=%s", settings.recognizer_url, state.get("job_id"))

    try:
        submit_job.invoke(
            {
                "url": settings.recognizer_url,
                "input_dir": state["input_dir"],
                "output_dir": state["output_dir"],
                "timeout": settings.recognizer_timeout,
            }
        )
    except PipelineError as e:
        return _failed("RECOGNIZE", e)

    return {}


def node_collect(state: RecognizeState, settings: Settings) -> Dict[str, Any]:
    """Maps the recognizer's output files to client-facing URLs."""
    try:
        results = list_outputs.invoke(
            {
                "output_dir": state["output_dir"],
                "job_id": state["job_id"],
                "prefix": settings.output_prefix,
                "wait": settings.result_wait,
            }
        )
    except PipelineError as e:
        return _failed("COLLECT", e)

    log.info("[COLLECT] %d results for job %s", len(results), state.get("job_id"))
    return {"results": results}
