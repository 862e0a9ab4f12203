from typing import List, Optional, TypedDict


class RecognizeState(TypedDict, total=False):
    """
    State passed between the LangGraph nodes of one recognition request.
    """

    image_urls: List[str]

    # Set by the allocate node
    job_id: Optional[str]
    input_dir: Optional[str]
    output_dir: Optional[str]

    # Local paths of downloaded images, in request order
    downloaded: Optional[List[str]]

    # Client-facing URLs of the files the recognizer produced
    results: Optional[List[str]]

    # Set by the first failing node; stops the graph
    error: Optional[str]
    status_code: Optional[int]
