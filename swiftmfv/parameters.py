"""
Access to run-time parameters.

SWIFT parameter files are two-level YAML documents (``SPH: {resolution_eta:
1.2348}``) and snapshots store the parameters that were used in the
``Parameters`` group as attributes named ``"SPH:resolution_eta"``. Both are
flattened here into a single ``"Section:key"`` mapping.
"""

import h5py

from typing import Any, Callable

from swiftmfv.errors import MissingParameterError


def decode(bytestring: object) -> str:
    """
    Decode input if it is a bytestring.

    If the input is not a bytestring, we instead try to interpret it as a string.

    Parameters
    ----------
    bytestring : object
        The (possibly) bytes object.

    Returns
    -------
    str
       The resulting string.
    """
    try:
        return bytestring.decode("utf-8")
    except AttributeError:
        return str(bytestring)


def flatten_parameters(nested: dict, prefix: str = "") -> dict[str, Any]:
    """
    Flatten a nested parameter dictionary into ``"Section:key"`` form.

    Parameters
    ----------
    nested : dict
        Possibly nested dictionary, e.g. as loaded from a parameter file.

    prefix : str, optional
        Section prefix applied to all keys at this level.

    Returns
    -------
    dict[str, Any]
        The flattened dictionary.
    """
    flat = {}

    for key, value in nested.items():
        name = f"{prefix}:{key}" if prefix else str(key)

        if isinstance(value, dict):
            flat.update(flatten_parameters(value, prefix=name))
        else:
            flat[name] = value

    return flat


class SWIFTParameters(object):
    """
    Read-only key/value view of the run-time parameters.

    Parameters
    ----------
    parameters : dict
        Either a nested dictionary (one level per section) or an already
        flattened ``"Section:key"`` dictionary.
    """

    def __init__(self, parameters: dict) -> None:
        self._parameters = flatten_parameters(parameters)

        return

    @classmethod
    def from_hdf5(cls, handle: h5py.File | h5py.Group) -> "SWIFTParameters":
        """
        Read the parameters stored in the ``Parameters`` group of a snapshot.

        Parameters
        ----------
        handle : h5py.File or h5py.Group
            Open file, or the ``Parameters`` group itself.

        Returns
        -------
        SWIFTParameters
            The parameters, with string values decoded.
        """
        try:
            group = handle["Parameters"]
        except KeyError:
            group = handle

        return cls({name: decode(value) for name, value in group.attrs.items()})

    def __contains__(self, name: str) -> bool:
        return name in self._parameters

    def __len__(self) -> int:
        return len(self._parameters)

    def __str__(self) -> str:
        return "\n".join(f"{name}: {value}" for name, value in self.items())

    def __repr__(self) -> str:
        return f"SWIFTParameters with {len(self)} entries"

    def items(self):
        return sorted(self._parameters.items())

    def get_param(self, name: str, kind: Callable = float) -> Any:
        """
        Get a compulsory parameter.

        Parameters
        ----------
        name : str
            Parameter name, ``"Section:key"``.

        kind : Callable, optional
            Type the value is converted to. Defaults to ``float``.

        Returns
        -------
        Any
            The parameter value.

        Raises
        ------
        MissingParameterError
            If the parameter is not present.
        """
        try:
            value = self._parameters[name]
        except KeyError:
            raise MissingParameterError(
                f"Cannot find compulsory parameter {name} in the parameter file."
            )

        return kind(value)

    def get_opt_param(self, name: str, default: Any, kind: Callable = float) -> Any:
        """
        Get an optional parameter, falling back to ``default``.

        Parameters
        ----------
        name : str
            Parameter name, ``"Section:key"``.

        default : Any
            Value returned when the parameter is absent.

        kind : Callable, optional
            Type the value is converted to. Defaults to ``float``.

        Returns
        -------
        Any
            The parameter value, or ``default``.
        """
        try:
            return kind(self._parameters[name])
        except KeyError:
            return default

    def write_attributes(self, group: h5py.Group) -> None:
        """
        Store the parameters as string attributes of ``group``.

        Parameters
        ----------
        group : h5py.Group
            Group (usually ``Parameters``) to attach the attributes to.
        """
        for name, value in self.items():
            group.attrs.create(name, str(value).encode("utf-8"))

        return
