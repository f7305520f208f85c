import json
import sys
import traceback

from .constants import DEV_MODE


class Logger:
    """
    Line oriented logger for the genesis tooling

    Stdout carries the genesis document, so everything goes to stderr,
    one <level><json> entry per line with level 0 (error) to 4 (trace).
    """

    def __init__(self, name=None, output=None):
        self.name = name
        self.output = output

    def error(self, message):
        self._log(0, message)

    def warn(self, message):
        self._log(1, message)

    def info(self, message):
        self._log(2, message)

    def debug(self, message):
        self._log(3, message)

    def trace(self, message):
        self._log(4, message)

    def failure(self, message, exc):
        """
        Logs an error line, followed by the traceback at debug in dev mode.
        """
        self.error(f"{message}: {exc}")
        if DEV_MODE:
            strs = traceback.format_exception(type(exc), exc, exc.__traceback__)
            self.debug("".join(strs))

    def _log(self, level, message):
        if self.name is not None:
            message = f"{self.name}: {message}"
        output = self.output if self.output is not None else sys.stderr
        print(f"{level}{json.dumps(message)}", file=output, flush=True)
