"""
Switchyard parameter definitions.

Overview
- Parameter: a named, described command-line token definition (base type).
- SwitchParameter: presence-only parameter bound to a zero-argument action.
- ArgumentParameter: value-bearing parameter bound to a one-argument action,
  optionally mandatory, tracking whether it was used during a parse pass.

Names
- Stored as given (for help output) and matched case-insensitively through
  the casefolded `key`. Names carry no leading punctuation: "settings", not
  "-settings". A bare "?" is a valid name.

Validation
- validate() returns a (success, message) pair. The base implementation
  always succeeds; ArgumentParameter fails when mandatory and never used.

Quick example:
    >>> from switchyard.parameters import SwitchParameter, ArgumentParameter
    >>> cache = SwitchParameter("cache", "Turn on caching", lambda: None)
    >>> settings = ArgumentParameter("settings", "Settings file", True, print)
    >>> settings.validate()
    (False, 'Mandatory parameter settings not specified')
"""
import functools
import logging
import operator
import re

from .utils import *

logger = logging.getLogger(__name__)


class ParameterType(type):
    """
    Metaclass giving parameter classes stable names, read-only fields and reprs.

    Responsibilities
    - Derive __typename__ from the class name ("SwitchParameter" -> "switch-parameter"),
      used as the prefix of configuration error messages.
    - Expose every name in __introspectable__ as a read-only property via mirror().
    - Provide __repr__/__rich_repr__ built from the introspectable fields.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_name(cls, name, /):
    """
    Validate a parameter name and return it trimmed.

    Raises
    - TypeError: name is not a string.
    - ValueError: name is empty after trimming or carries a leading "-" or "/".
    """
    if not isinstance(name, str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not (name := name.strip()):
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
    elif name.startswith(("-", "/")):
        raise ValueError(f"{cls.__typename__} 'name' must not start with '-' or '/'")
    return name


def _sanitize_description(cls, description, /, *, required):
    """
    Validate a description and return it as given.

    Unset is accepted only when not required and becomes "".
    """
    if description is Unset and not required:
        return ""
    if not isinstance(description, str):
        raise TypeError(f"{cls.__typename__} 'description' must be a string")
    elif required and not description.strip():
        raise ValueError(f"{cls.__typename__} 'description' cannot be empty")
    return description


def _sanitize_action(cls, action, /):
    if action is Unset or action is None:
        raise TypeError(f"{cls.__typename__} 'action' is required")
    if not callable(action):
        raise TypeError(f"{cls.__typename__} 'action' must be callable")
    return action


class Parameter(metaclass=ParameterType):
    """
    A named, described command-line token definition.

    Properties
    - name: the name as registered (no leading punctuation).
    - description: guidance shown by help output.
    - key: casefolded name used for matching.
    """

    __introspectable__ = (
        "name",
        "description",
    )

    def __init__(self, name, description=Unset, /):
        self._name = _sanitize_name(type(self), name)
        self._description = _sanitize_description(type(self), description, required=False)

    @property
    def key(self):
        return self._name.casefold()

    def matches(self, name, /):
        """
        Case-insensitive, exact comparison against a bare name.
        """
        return self.key == name.casefold()

    def validate(self):
        """
        Return (success, message). The base parameter has no invariants to check.
        """
        return True, ""


class SwitchParameter(Parameter):
    """
    Presence-only parameter: fires its action whenever its name is seen.

    Switches have no mandatory concept, so validate() always succeeds.
    """

    __introspectable__ = (
        "name",
        "description",
        "action",
    )

    def __init__(self, name, description=Unset, action=Unset, /):
        super().__init__(name, description)
        self._action = _sanitize_action(type(self), action)

    def execute(self):
        logger.debug("executing switch %r", self._name)
        self._action()


class ArgumentParameter(Parameter):
    """
    Value-bearing parameter: fires its action with the token following its name.

    State
    - mandatory: fixed at construction.
    - used: False until execute() completes once, then True for good.

    execute() can run more than once; each value is forwarded to the action,
    so append-style actions collect every value and assignment-style actions
    keep the last one.
    """

    __introspectable__ = (
        "name",
        "description",
        "mandatory",
        "used",
        "action",
    )

    def __init__(self, name, description, mandatory=False, action=Unset, /):
        super().__init__(name)
        self._description = _sanitize_description(type(self), description, required=True)
        self._action = _sanitize_action(type(self), action)
        self._mandatory = bool(mandatory)
        self._used = False

    def execute(self, value, /):
        logger.debug("executing parameter %r with %r", self._name, value)
        self._action(value)
        # Only reached when the action returned normally.
        self._used = True

    def validate(self):
        if self._mandatory and not self._used:
            return False, f"Mandatory parameter {self._name} not specified"
        return True, ""


__all__ = (
    "Parameter",
    "SwitchParameter",
    "ArgumentParameter",
)

# Not part of the public API.
del ParameterType
