'''
Exceptions for tabsak library
'''


class TabSAKException(Exception):
    """
    Generic base class for TabSAK exceptions
    """
    pass


class TabSAKIOError(TabSAKException):
    """
    IO error
    """
    pass


class TabSAKValueError(TabSAKException, ValueError):
    """
    Value error
    """
    pass


class TabSAKContentError(TabSAKException):
    """
    Content error (such as no measures or no tracks)
    """
    pass


class TabSAKNotImplemented(TabSAKException):
    """
    Not implemented error
    """
    pass


class MissingBeatTrack(TabSAKContentError):
    """
    No beat markers were supplied, so no measures can be built
    """
    pass


class InvalidBeatMarker(TabSAKValueError):
    """
    A note on the beat track that is neither a downbeat nor a beat marker
    """
    def __init__(self, start_time, key):
        self.start_time = start_time
        self.key = key
        super().__init__("Invalid beat marker at time %d with key %d" % (start_time, key))


class UnsupportedTimeResolution(TabSAKIOError):
    """
    The source file does not use metric (ticks per quarter note) timing
    """
    pass


class NotationRenderError(TabSAKValueError):
    """
    An onset could not be rendered as a notated element
    """
    pass
