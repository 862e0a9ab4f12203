from __future__ import annotations

import argparse
import logging
import sys

import uvicorn

from api.main import create_app
from pipeline.settings import Settings

log = logging.getLogger("serve")


def parse_args(argv=None, env_settings: Settings | None = None) -> Settings:
    """
    Build `Settings` from command line flags.

    Flags default to the environment (see `Settings.from_env`).
    """
    base = env_settings or Settings.from_env()

    parser = argparse.ArgumentParser(description="Image recognition gateway")
    parser.add_argument("--input", dest="input_dir", default=base.input_dir,
                        help="directory to store downloaded input images")
    parser.add_argument("--output", dest="output_dir", default=base.output_dir,
                        help="directory to store processed input images")
    parser.add_argument("--darkflow-url", dest="recognizer_url", default=base.recognizer_url,
                        help="URL where darkflow is waiting")
    parser.add_argument("--insecure-skip-verify", action=argparse.BooleanOptionalAction,
                        default=base.insecure_skip_verify,
                        help="do not verify TLS certificates of image sources")
    parser.add_argument("--fetch-check-status", action=argparse.BooleanOptionalAction,
                        default=base.fetch_check_status,
                        help="fail a request when an image URL answers 4xx/5xx")
    parser.add_argument("--fetch-timeout", type=float, default=base.fetch_timeout)
    parser.add_argument("--recognizer-timeout", type=float, default=base.recognizer_timeout)
    parser.add_argument("--result-wait", type=float, default=base.result_wait,
                        help="seconds to wait for the output dir after darkflow returns")
    parser.add_argument("--host", default=base.host)
    parser.add_argument("--port", type=int, default=base.port)
    parser.add_argument("--log-level", default=base.log_level)

    args = parser.parse_args(argv)
    return Settings(**vars(args))


def main(argv=None) -> None:
    settings = parse_args(argv)

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        settings.ensure_dirs()
    except OSError as e:
        log.critical("Could not create data directories: %s", e)
        sys.exit(1)

    log.info("Starting file server at %s", settings.output_dir)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
