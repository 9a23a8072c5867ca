# reporting.py — console reporting that plays well with tqdm progress bars

from tqdm import tqdm

PREFIX = "Unique attachments: "

class Reporter:
    """notify/info/warn/log_error/debug, written through tqdm.write.

    Every message is also kept per level (notices, infos, warnings,
    errors) for callers that want to inspect what happened.
    """

    def __init__(self, debug: bool = False, quiet: bool = False):
        self.debug_enabled = debug
        self.quiet = quiet
        self.notices: list[str] = []
        self.infos: list[str] = []
        self.warnings: list[str] = []
        self.errors: list[str] = []

    def _emit(self, line: str):
        if not self.quiet:
            tqdm.write(line)

    def notify(self, message: str):
        self.notices.append(message)
        self._emit(message)

    def info(self, message: str):
        self.infos.append(message)
        self._emit(PREFIX + message)

    def warn(self, message: str):
        self.warnings.append(message)
        self._emit("[warn] " + PREFIX + message)

    def log_error(self, message: str):
        self.errors.append(message)
        self._emit("[error] " + PREFIX + message)

    def debug(self, message: str):
        if self.debug_enabled:
            self._emit("[debug] " + message)
