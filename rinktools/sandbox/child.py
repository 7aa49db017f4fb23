"""The child side of the sandbox: answer framed requests on stdin/stdout."""

from __future__ import annotations

import io
import signal
import sys
import time
import traceback
from contextlib import redirect_stdout
from typing import Any, BinaryIO, NoReturn

from .errors import DecodeFailed, PanicResponse, ReadFailed
from .frame import read_frame, write_frame
from .memory import MemoryTracker
from .service import Response, Service


def serve(
    service_type: type[Service],
    tracker: MemoryTracker,
    reader: BinaryIO,
    writer: BinaryIO,
) -> int:
    """Perform the handshake, then answer requests until input ends.

    Returns the exit status the child should use: 0 when the input ended,
    1 when the service could not be created or a request failed.
    """
    start = time.perf_counter()
    config = read_frame(reader)

    log = io.StringIO()
    try:
        with redirect_stdout(log):
            service = service_type.create(config)
    except Exception as exc:
        write_frame(
            writer,
            Response(
                result=str(exc),
                memory_used=tracker.get_max(),
                time_taken=time.perf_counter() - start,
                stdout=log.getvalue(),
            ),
        )
        return 1

    write_frame(
        writer,
        Response(
            result=None,
            memory_used=tracker.get_max(),
            time_taken=time.perf_counter() - start,
            stdout=log.getvalue(),
        ),
    )

    while True:
        tracker.reset_max()
        log = io.StringIO()
        started = time.perf_counter()
        result: Any
        try:
            request = read_frame(reader)
        except ReadFailed:
            return 0
        except DecodeFailed:
            result = PanicResponse(traceback.format_exc())
        else:
            # The clock starts once the request has been read.
            started = time.perf_counter()
            try:
                with redirect_stdout(log):
                    result = service.handle(request)
            except Exception:
                result = PanicResponse(traceback.format_exc())

        write_frame(
            writer,
            Response(
                result=result,
                memory_used=tracker.get_max(),
                time_taken=time.perf_counter() - started,
                stdout=log.getvalue(),
            ),
        )
        # Recovering from a failure is hard; exit and let the parent restart us.
        if isinstance(result, PanicResponse):
            return 1


def become_child(service_type: type[Service], tracker: MemoryTracker) -> NoReturn:
    """Serve requests over the standard streams, then exit the process."""
    try:
        # Interruption is the parent's business.
        signal.signal(signal.SIGINT, signal.SIG_IGN)
    except ValueError:
        pass
    sys.exit(serve(service_type, tracker, sys.stdin.buffer, sys.stdout.buffer))