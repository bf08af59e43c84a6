import logging
from typing import Callable, Dict, Tuple


class TreeLogger:
    """Wraps a logging.Logger so that it's easy to use str.format syntax.

    Messages are only formatted when the logger is enabled for the level,
    so rotation logging costs one level check when DEBUG is off.
    """

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def debug(
        self, format_string: str, *args: object, **kwargs: object
    ) -> None:
        if self._logger.isEnabledFor(logging.DEBUG):
            _log(self._logger.debug, format_string, args, kwargs)

    def info(
        self, format_string: str, *args: object, **kwargs: object
    ) -> None:
        if self._logger.isEnabledFor(logging.INFO):
            _log(self._logger.info, format_string, args, kwargs)


def get_logger(name: str) -> TreeLogger:
    return TreeLogger(logging.getLogger(name))


def _log(
    logging_method: Callable,
    format_string: str,
    args: Tuple[object, ...],
    kwargs: Dict[str, object],
) -> None:
    exc_info = kwargs.pop('exc_info', None)
    logging_method(
        _DelayedFormat(format_string, args, kwargs),
        exc_info=exc_info,
        stacklevel=3,
    )


class _DelayedFormat:
    def __init__(
        self, format_string: str, args: Tuple[object, ...], kwargs: Dict[str, object]
    ) -> None:
        self._format_string, self._args, self._kwargs = (
            format_string,
            args,
            kwargs,
        )

    def __str__(self) -> str:
        return self._format_string.format(*self._args, **self._kwargs)
