from __future__ import annotations

import os
import secrets
from dataclasses import dataclass
from typing import Optional

from pipeline.errors import JobAllocationError

JOB_ID_LENGTH = 8


@dataclass(frozen=True)
class Job:
    id: str
    input_dir: str
    output_dir: str


def generate_job_id(length: int = JOB_ID_LENGTH) -> str:
    """Return a random lowercase hex string of exactly `length` characters."""
    return secrets.token_hex((length + 1) // 2)[:length]


def allocate_job(input_root: str, output_root: str, job_id: Optional[str] = None) -> Job:
    """
    Create the input directory for a new job.

    The directory must not exist yet; an ID clash is reported as an
    allocation failure rather than reusing someone else's directory.
    The output directory is only computed, never created here.
    """
    job_id = job_id or generate_job_id()
    input_dir = os.path.join(input_root, job_id)

    try:
        os.mkdir(input_dir, 0o755)
    except OSError as e:
        raise JobAllocationError(f"could not create input dir: {e}") from e

    return Job(id=job_id, input_dir=input_dir, output_dir=os.path.join(output_root, job_id))
