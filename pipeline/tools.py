from __future__ import annotations

import os
import posixpath
import time
from typing import List, Optional

import requests
from langchain_core.tools import tool

from pipeline.errors import (
    CollectError,
    FetchError,
    RecognizerError,
    RecognizerUnavailable,
)

CHUNK_SIZE = 1024 * 1024
POLL_INTERVAL = 0.5  # seconds


@tool
def fetch_image(
    url: str,
    dest: str,
    verify_tls: bool = True,
    timeout: Optional[float] = None,
    check_status: bool = False,
) -> str:
    """
    Downloads a remote image and writes it to a new local file.

    The body is written whatever the response status, unless
    `check_status` is set.

    Args:
        url: Source URL (http or https).
        dest: Local path of the file to create.
        verify_tls: Check the server certificate. Only turn off for
            trusted internal networks.
        timeout: Connect/read timeout in seconds, None for no limit.
        check_status: Fail on 4xx/5xx responses instead of saving them.

    Returns:
        The destination path.
    """
    try:
        with requests.get(url, stream=True, verify=verify_tls, timeout=timeout) as r:
            if check_status:
                r.raise_for_status()
            with open(dest, "wb") as f:
                for chunk in r.iter_content(chunk_size=CHUNK_SIZE):
                    if chunk:
                        f.write(chunk)
    # urllib3 reports unparseable hosts as ValueError, not RequestException
    except (requests.RequestException, ValueError) as e:
        raise FetchError(f"could not wget image: {e}") from e
    except OSError as e:
        raise FetchError(f"could not write image: {e}") from e

    return dest


@tool
def submit_job(
    url: str,
    input_dir: str,
    output_dir: str,
    timeout: Optional[float] = None,
) -> int:
    """
    Posts a job to the recognition service.

    The service reads images from `input_dir` and writes its results to
    `output_dir`. Only a 200 response counts as success.

    Returns:
        The response status code (always 200).
    """
    try:
        r = requests.post(
            url,
            json={"input_dir": input_dir, "output_dir": output_dir},
            timeout=timeout,
        )
    except requests.RequestException as e:
        raise RecognizerUnavailable(f"could not call darkflow: {e}") from e

    with r:
        if r.status_code != requests.codes.ok:
            raise RecognizerError("darkflow returned error", status_code=r.status_code)
        return r.status_code


@tool
def list_outputs(
    output_dir: str,
    job_id: str,
    prefix: str = "/output",
    wait: float = 0.0,
) -> List[str]:
    """
    Lists the files the recognition service wrote for a job.

    Entries directly inside `output_dir` are returned as
    `<prefix>/<job_id>/<name>`, sorted by name. Nothing is filtered and
    subdirectories are not descended into. Names that are not valid
    UTF-8 come back with U+FFFD in place of the bad bytes.

    Args:
        output_dir: Job output directory.
        job_id: Job identifier used in the returned URLs.
        prefix: URL prefix the output root is served under.
        wait: Seconds to wait for `output_dir` to appear before listing.
    """
    deadline = time.monotonic() + wait
    while not os.path.isdir(output_dir) and time.monotonic() < deadline:
        time.sleep(POLL_INTERVAL)

    try:
        names = sorted(os.listdir(output_dir))
    except OSError as e:
        raise CollectError(f"could not read output dir: {e}") from e

    return [posixpath.join(prefix, job_id, display_name(name)) for name in names]


def display_name(name: str) -> str:
    """Replace bytes that are not valid UTF-8 so the name can go into JSON."""
    return os.fsencode(name).decode("utf-8", "replace")
