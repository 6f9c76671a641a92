"""
Errors raised by darkroom.

Every failure carries one of the kinds in ErrorKind. Filter and I/O
failures are caught where an operation is driven (the stage, the asset or
the menu) and turned into a notice for the user; none of them end the
program.
"""

from enum import Enum


class ErrorKind(Enum):
    LOAD   = 'load'         # source unreachable or unreadable
    FILTER = 'filter'       # a transform could not complete
    WRITE  = 'write'        # the output sink rejected the write


class DarkroomError(RuntimeError):
    """Base class. Subclasses set kind."""
    kind = None

    @property
    def notice(self):
        """The text shown to the user"""
        return f"~ {self.kind.name} FAILED: {self}"


class LoadFailure(DarkroomError):
    """cv2 or the file system cannot provide the image or video"""
    kind = ErrorKind.LOAD


class NotFound(LoadFailure):
    """The asset resolver found nothing at the location"""


class FilterFailure(DarkroomError):
    """A transformation could not complete"""
    kind = ErrorKind.FILTER


class WriteFailure(DarkroomError):
    """The image or video could not be written"""
    kind = ErrorKind.WRITE
