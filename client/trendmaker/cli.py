#!/usr/bin/env python3
"""
TrendMaker command line client.

Commands:
- render:     Submit a render request and follow it to completion
- serve-mock: Run the in-memory mock render service

Exit Codes:
===========
- 0: Render completed
- 1: Submission error
- 2: Render failed on the server
- 3: Status polling error
- 130: Interrupted
"""

import argparse
import asyncio
import sys
from typing import List, Optional, TextIO

import httpx

from trendmaker.config import settings
from trendmaker.exceptions import JobFailedError, SubmissionError, TransportError
from trendmaker.logging_config import configure_logging
from trendmaker.models import RenderRequest
from trendmaker.services import ConsoleNotifier, JobController, RenderServiceClient

EXIT_OK = 0
EXIT_SUBMISSION_ERROR = 1
EXIT_RENDER_FAILED = 2
EXIT_TRANSPORT_ERROR = 3
EXIT_INTERRUPTED = 130

MOCK_BASE_URL = "http://mock-render.local"


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def _mock_http_client(polls: Optional[int]) -> httpx.AsyncClient:
    from trendmaker.mock_service import MockRenderService

    service = MockRenderService(polls_to_complete=polls)
    return httpx.AsyncClient(
        transport=httpx.ASGITransport(app=service.app),
        base_url=MOCK_BASE_URL,
    )


async def run_render(
    title: str,
    duration: str,
    base_url: Optional[str] = None,
    interval: Optional[float] = None,
    max_attempts: Optional[int] = None,
    mock: bool = False,
    mock_polls: Optional[int] = None,
    out: Optional[TextIO] = None,
) -> int:
    """
    Submit one render and print status changes until it settles.

    Returns:
        int: Process exit code
    """
    out = out or sys.stdout
    http_client = _mock_http_client(mock_polls) if mock else None
    client = RenderServiceClient(
        base_url=MOCK_BASE_URL if mock else base_url,
        http_client=http_client,
    )
    last_status = {"value": None}

    def print_status(controller: JobController) -> None:
        if controller.status and controller.status != last_status["value"]:
            last_status["value"] = controller.status
            print(controller.status, file=out)

    controller = JobController(
        client=client,
        notifier=ConsoleNotifier(),
        poll_interval=interval,
        max_poll_attempts=max_attempts,
    )
    controller.subscribe(print_status)
    print(f"Backend: {controller.base_url}", file=out)

    try:
        await controller.submit(RenderRequest.from_form(title, duration))
        job = await controller.wait()
    except SubmissionError:
        return EXIT_SUBMISSION_ERROR
    except JobFailedError:
        return EXIT_RENDER_FAILED
    except TransportError:
        return EXIT_TRANSPORT_ERROR
    finally:
        await controller.close()
        await client.aclose()
        if http_client is not None:
            await http_client.aclose()

    if job is None or job.result_url is None:
        return EXIT_INTERRUPTED

    print(f"Video: {job.result_url}", file=out)
    return EXIT_OK


def cmd_render(args: argparse.Namespace) -> int:
    try:
        return asyncio.run(
            run_render(
                title=args.title,
                duration=args.duration,
                base_url=args.base_url,
                interval=args.interval,
                max_attempts=args.max_attempts,
                mock=args.mock,
                mock_polls=args.polls,
            )
        )
    except KeyboardInterrupt:
        print("Interrupted", file=sys.stderr)
        return EXIT_INTERRUPTED


def cmd_serve_mock(args: argparse.Namespace) -> int:
    import uvicorn

    from trendmaker.mock_service import create_app

    uvicorn.run(
        create_app(polls_to_complete=args.polls),
        host=args.host,
        port=args.port,
        log_level=args.log_level.lower(),
    )
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="trendmaker",
        description="Submit automontage renders and follow them to completion.",
    )
    parser.add_argument(
        "--log-level",
        default=settings.LOG_LEVEL,
        help="Logging level (default: %(default)s)",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit log records as JSON lines",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    render = subparsers.add_parser("render", help="Submit a render and wait for the video")
    render.add_argument("--title", default="Hello TrendMaker", help="Video title text")
    render.add_argument(
        "--duration",
        default=str(settings.DEFAULT_DURATION_SECONDS),
        help="Duration in seconds; invalid values fall back to the default",
    )
    render.add_argument("--base-url", default=None, help="Render service base URL")
    render.add_argument("--interval", type=float, default=None, help="Seconds between status polls")
    render.add_argument("--max-attempts", type=_positive_int, default=None, help="Give up after N status polls")
    render.add_argument("--mock", action="store_true", help="Use the in-process mock service")
    render.add_argument("--polls", type=_positive_int, default=None, help="Mock polls before a job finishes")
    render.set_defaults(func=cmd_render)

    serve = subparsers.add_parser("serve-mock", help="Run the mock render service")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    serve.add_argument("--polls", type=_positive_int, default=None, help="Polls before a job finishes")
    serve.set_defaults(func=cmd_serve_mock)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level, json_output=args.json_logs)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
