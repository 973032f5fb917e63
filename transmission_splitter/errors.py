import signal as _signal


class SplitterError(Exception):
    """Base class of every failure raised by the splitter pipeline."""


class NotFoundError(SplitterError):
    def __init__(self, bucket: str, key: str):
        super().__init__(f"No object s3://{bucket}/{key}")
        self.bucket = bucket
        self.key = key


class InvalidBodyError(SplitterError):
    """Storage answered, but without a readable body stream."""


class LaunchError(SplitterError):
    def __init__(self, command: list[str], cause: OSError):
        super().__init__(f"Could not start {command[0]!r}: {cause}")
        self.command = command
        self.cause = cause


class ToolExecutionError(SplitterError):
    """
    The separation tool ran but did not exit cleanly.

    `code` is the process return code; for a signal termination it is the
    (negative) value reported by subprocess and `signal` holds the signal number.
    """

    def __init__(self, code: int | None, message: str | None = None):
        self.code = code
        self.signal = -code if code is not None and code < 0 else None
        if message is None:
            if self.signal is not None:
                message = f"Separation tool killed by signal {_signal_name(self.signal)}"
            else:
                message = f"Non-zero exit code ({code})"
        super().__init__(message)


class SeparatorTimeoutError(ToolExecutionError):
    def __init__(self, timeout: float, code: int | None = None):
        super().__init__(code, f"Separation tool did not finish within {timeout}s")
        self.timeout = timeout


class NoOutputError(SplitterError):
    def __init__(self, job_id: str, output_dir):
        super().__init__(f"Separation tool produced no files for {job_id} in {output_dir}")
        self.job_id = job_id
        self.output_dir = output_dir


class TransferError(SplitterError):
    """
    One or more of a batch of concurrent moves/uploads failed.

    `failures` maps item name to the exception it raised, `succeeded` lists the
    names that completed. Every item of the batch appears in exactly one of them.
    """

    def __init__(self, operation: str, failures: dict[str, BaseException], succeeded: list[str]):
        self.operation = operation
        self.failures = dict(failures)
        self.succeeded = list(succeeded)
        names = ", ".join(sorted(self.failures))
        super().__init__(
            f"{operation} failed for {len(self.failures)} of "
            f"{len(self.failures) + len(self.succeeded)} item(s): {names}"
        )

    @property
    def all_failed(self) -> bool:
        return not self.succeeded


def _signal_name(signum: int) -> str:
    try:
        return _signal.Signals(signum).name
    except ValueError:
        return str(signum)
