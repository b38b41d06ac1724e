"""
Exceptions raised by atomdesc.

Each exception type corresponds to one of the status codes reported by the
boundary functions in `atomdesc.api`.

"""

__author__ = "The atomdesc developers"
__date__ = "2026-10-19"


class AtomdescError(Exception):
    """
    Error without a more specific classification.

    """

    def __init__(self, msg):
        super().__init__(msg)
        self.msg = msg


class InvalidParameterError(AtomdescError):

    def __init__(self, msg):
        super().__init__(msg)


class ParameterSyntaxError(AtomdescError):

    def __init__(self, msg):
        super().__init__("malformed parameters: {}".format(msg))


class EncodingError(AtomdescError):

    def __init__(self, msg="string contains data that is not valid UTF-8"):
        super().__init__(msg)


class InternalFault(AtomdescError):
    """
    Unexpected fault inside atomdesc, inside a calculator implementation or
    inside a caller-supplied system, contained instead of propagated.

    """

    def __init__(self, msg):
        super().__init__(msg)
