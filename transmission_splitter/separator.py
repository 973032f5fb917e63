import logging
import subprocess
import threading
from pathlib import Path
from typing import Callable, Optional

from .errors import LaunchError, SeparatorTimeoutError, ToolExecutionError
from .logging_setup import TOOL_LOGGER

LOG = logging.getLogger(__name__)
TOOL_LOG = logging.getLogger(TOOL_LOGGER)

KILL_GRACE_SECONDS = 5.0


def _pump_lines(stream, sink: Callable[[str], None]) -> None:
    with stream:
        for line in stream:
            try:
                sink(line.rstrip("\r\n"))
            except Exception:
                # Keep draining, a full pipe would stall the tool.
                LOG.warning("Output sink failed on line %r", line, exc_info=True)


def _stop(process: subprocess.Popen) -> None:
    if process.poll() is not None:
        return
    process.terminate()
    try:
        process.wait(timeout=KILL_GRACE_SECONDS)
    except subprocess.TimeoutExpired:
        process.kill()
        process.wait()


def _escape_template(text: str) -> str:
    return text.replace("{", "{{").replace("}", "}}")


class Separator:
    """
    Runs demucs as
    `<executable> -u -m demucs -n <model> -o <output_root> --filename <name>/{stem}.{ext} <source>`.

    demucs would name the per-track folder after the source file name with its
    last extension stripped; `--filename` pins it to the full file name, so a job
    whose source is `source/<id>` always lands in `<output_root>/<model>/<id>/`.
    The call blocks until the process has exited; its output is forwarded line by
    line to `on_line` and never inspected.
    """

    module = "demucs"
    # Bound on waiting for the output pipe once the tool itself is gone.
    drain_timeout = KILL_GRACE_SECONDS

    def __init__(
        self,
        output_root: Path,
        model: str = "htdemucs",
        executable: str = "python",
        timeout: Optional[float] = None,
        on_line: Optional[Callable[[str], None]] = None,
    ):
        self.output_root = Path(output_root)
        self.model = model
        self.executable = executable
        self.timeout = timeout
        self.on_line = on_line or TOOL_LOG.info

    def output_dir(self, job_id: str) -> Path:
        return self.output_root / self.model / job_id

    def command(self, source_path: Path) -> list[str]:
        source_path = Path(source_path)
        return [
            self.executable, "-u", "-m", self.module,
            "-n", self.model,
            "-o", str(self.output_root),
            "--filename", _escape_template(source_path.name) + "/{stem}.{ext}",
            str(source_path),
        ]

    def separate(self, source_path: Path) -> int:
        cmd = self.command(source_path)
        LOG.info("Running %s", " ".join(cmd))
        try:
            process = subprocess.Popen(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
                bufsize=1,
            )
        except OSError as e:
            raise LaunchError(cmd, e) from e

        reader = threading.Thread(
            target=_pump_lines, args=(process.stdout, self.on_line), name="separator-output", daemon=True
        )
        reader.start()
        try:
            try:
                code = process.wait(timeout=self.timeout)
            except subprocess.TimeoutExpired:
                _stop(process)
                raise SeparatorTimeoutError(self.timeout, process.returncode)
        finally:
            _stop(process)
            # A leftover child of the tool may keep the pipe open.
            reader.join(timeout=self.drain_timeout if self.timeout is not None else None)
            if reader.is_alive():
                LOG.warning("Tool output still open %.1fs after exit, no longer waiting for it", self.drain_timeout)

        if code != 0:
            raise ToolExecutionError(code)
        LOG.info("Separation finished for %s", source_path)
        return code
