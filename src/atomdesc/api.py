"""
Status-code based boundary surface.

Every function here catches all errors, records a message retrievable with
`last_error()` on the calling thread, and reports a `Status` instead of
raising.  Functions returning data return a tuple starting with the
status; on failure the data slots are None/0.  The two constructors return
the new object, or None on failure.

Example:
    >>> calculator = calculator_create("dummy_calculator", parameters)
    >>> descriptor = descriptor_create()
    >>> status = calculator_compute(calculator, descriptor, [system])
    >>> status, values, n_samples, n_features = descriptor_values(descriptor)

"""

from typing import List, Optional, Sequence

from .calculator import CalculationOptions, Calculator
from .descriptor import Descriptor
from .exceptions import EncodingError, InvalidParameterError
from .indexes import IndexKind
from .status import Status, boundary, boundary_with, last_error

__author__ = "The atomdesc developers"
__date__ = "2026-10-19"

__all__ = [
    "Status",
    "IndexKind",
    "CalculationOptions",
    "last_error",
    "descriptor_create",
    "descriptor_free",
    "descriptor_values",
    "descriptor_gradients",
    "descriptor_indexes",
    "descriptor_indexes_names",
    "descriptor_densify",
    "calculator_create",
    "calculator_free",
    "calculator_name",
    "calculator_parameters",
    "calculator_compute",
]


def _check_descriptor(descriptor):
    if not isinstance(descriptor, Descriptor):
        raise InvalidParameterError(
            "expected a descriptor, got {}".format(type(descriptor).__name__))


def _check_calculator(calculator):
    if not isinstance(calculator, Calculator):
        raise InvalidParameterError(
            "expected a calculator, got {}".format(type(calculator).__name__))


@boundary_with(None)
def _descriptor_create():
    return Status.SUCCESS, Descriptor()


def descriptor_create() -> Optional[Descriptor]:
    """
    Create a new empty descriptor.
    """
    return _descriptor_create()[1]


@boundary
def descriptor_free(descriptor: Optional[Descriptor]) -> Status:
    """
    Release the data of `descriptor`.  Does nothing for None.
    """
    if descriptor is None:
        return Status.SUCCESS
    _check_descriptor(descriptor)
    descriptor.clear()
    return Status.SUCCESS


@boundary_with(None, 0, 0)
def descriptor_values(descriptor: Descriptor):
    """
    Returns:
      (status, values, n_samples, n_features); values is a read-only
      row-major array, or None when there are no samples; the number
      of features is reported even then.
    """
    _check_descriptor(descriptor)
    return (Status.SUCCESS,) + _matrix(descriptor.values)


@boundary_with(None, 0, 0)
def descriptor_gradients(descriptor: Descriptor):
    """
    Returns:
      (status, gradients, n_gradient_samples, n_features); gradients is
      None when the descriptor holds no gradients.
    """
    _check_descriptor(descriptor)
    return (Status.SUCCESS,) + _matrix(descriptor.gradients)


@boundary_with(None, 0, 0)
def descriptor_indexes(descriptor: Descriptor, kind: IndexKind):
    """
    Returns:
      (status, values, count, size) for the index table of the given
      kind; values is a read-only (count, size) int32 array, or None when
      the table is absent or has no rows.  A table without rows still
      reports its number of columns.
    """
    _check_descriptor(descriptor)
    indexes = descriptor.indexes(_kind(kind))
    if indexes is None:
        return Status.SUCCESS, None, 0, 0
    if indexes.count == 0:
        return Status.SUCCESS, None, 0, indexes.size
    return Status.SUCCESS, indexes.values, indexes.count, indexes.size


@boundary
def descriptor_indexes_names(descriptor: Descriptor, kind: IndexKind,
                             names: List[Optional[str]]) -> Status:
    """
    Fill the `names` buffer with the column names of an index table.

    All `len(names)` slots are written: slots beyond the number of
    columns, or all of them when the table is absent, are set to None.
    Fails with INVALID_PARAMETER if there are fewer slots than names.
    """
    _check_descriptor(descriptor)
    indexes = descriptor.indexes(_kind(kind))
    available = () if indexes is None else indexes.names
    if len(names) < len(available):
        raise InvalidParameterError(
            "not enough space for all names: got {} slots, need {}".format(
                len(names), len(available)))
    for i in range(len(names)):
        names[i] = available[i] if i < len(available) else None
    return Status.SUCCESS


@boundary
def descriptor_densify(descriptor: Descriptor, variables: Sequence,
                       requested=None) -> Status:
    """
    Move the sample `variables` to the features, see `Descriptor.densify`.
    """
    _check_descriptor(descriptor)
    descriptor.densify([_text(v, "variable name") for v in variables],
                       requested)
    return Status.SUCCESS


@boundary_with(None)
def _calculator_create(name, parameters):
    return Status.SUCCESS, Calculator(name, parameters)


def calculator_create(name, parameters) -> Optional[Calculator]:
    """
    Create a calculator with the given name and JSON parameters, or return
    None on failure.
    """
    return _calculator_create(name, parameters)[1]


@boundary
def calculator_free(calculator: Optional[Calculator]) -> Status:
    """
    Release `calculator`.  It must not be used afterwards.  Does nothing
    for None.
    """
    if calculator is None:
        return Status.SUCCESS
    _check_calculator(calculator)
    calculator._implementation = None
    return Status.SUCCESS


@boundary
def calculator_name(calculator: Calculator, buffer: bytearray) -> Status:
    """
    Copy the NUL-terminated UTF-8 name of `calculator` into `buffer`.
    Fails with INVALID_PARAMETER if the buffer is too small.
    """
    _check_calculator(calculator)
    _copy_to_buffer(calculator.name, buffer)
    return Status.SUCCESS


@boundary
def calculator_parameters(calculator: Calculator,
                          buffer: bytearray) -> Status:
    """
    Copy the NUL-terminated UTF-8 parameters of `calculator` into
    `buffer`.  Fails with INVALID_PARAMETER if the buffer is too small.
    """
    _check_calculator(calculator)
    _copy_to_buffer(calculator.parameters, buffer)
    return Status.SUCCESS


@boundary
def calculator_compute(calculator: Calculator, descriptor: Descriptor,
                       systems: Sequence,
                       options: Optional[CalculationOptions] = None
                       ) -> Status:
    """
    Run `calculator` on `systems`, replacing the contents of `descriptor`.
    """
    _check_calculator(calculator)
    _check_descriptor(descriptor)
    if options is None:
        options = CalculationOptions()
    calculator.compute(list(systems), descriptor, options)
    return Status.SUCCESS


def _kind(kind):
    try:
        return IndexKind(kind)
    except ValueError:
        raise InvalidParameterError("invalid index kind: {}".format(kind))


def _matrix(array):
    if array is None:
        return None, 0, 0
    if array.shape[0] == 0:
        return None, 0, array.shape[1]
    view = array.view()
    view.setflags(write=False)
    return view, array.shape[0], array.shape[1]


def _text(value, what):
    if isinstance(value, (bytes, bytearray)):
        try:
            return bytes(value).decode("utf-8")
        except UnicodeDecodeError:
            raise EncodingError(
                "{} contains data that is not valid UTF-8".format(what))
    return value


def _copy_to_buffer(text, buffer):
    data = text.encode("utf-8") + b"\0"
    if len(data) > len(buffer):
        raise InvalidParameterError(
            "string buffer is not big enough: got space for {} bytes, "
            "need {}".format(len(buffer), len(data)))
    buffer[:len(data)] = data
