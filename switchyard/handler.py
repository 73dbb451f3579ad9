"""
Switchyard parameter handler: register, parse, validate and report.

What this module provides
- ParameterHandler: holds a snapshot of the command-line tokens, the registered
  switches and argument parameters, a default (positional) action and the
  error channel; parse() dispatches every token exactly once.

Lifecycle
- Construct with the raw tokens, register parameters and listeners, then call
  parse() once. Registration and a second parse() after that are rejected.

Grammar
- "-name" or "/name" (name matched case-insensitively and exactly).
- switches consume only their own token; argument parameters also consume
  the following token as their value.
- anything else is handed, in order, to the default action.

Error channel
- Every problem becomes a ParameterErrorEvent that is recorded on the handler
  (see .errors), flips .valid to False for good, and is delivered at once to
  each subscribed listener in subscription order. Scanning never stops early.

Quick start
    from switchyard import ParameterHandler

    sources = []
    handler = ParameterHandler(["-settings", "rules.xml", "a.cs"])
    handler.add_mandatory_parameter("settings", "Settings file", print)
    handler.set_default(sources.append)
    handler.subscribe(lambda event: print("Parameter Error:", event.message))
    handler.parse()
"""
import logging
from collections import defaultdict
from collections.abc import Iterable

from rich.console import Console
from rich.text import Text

from .faults import FaultCode, ParameterErrorEvent, ParameterExit
from .parameters import ArgumentParameter, SwitchParameter
from .utils import *

logger = logging.getLogger(__name__)

_PREFIXES = ("-", "/")


class ParameterHandler:
    """
    Command-line parameter dispatcher.

    Properties
    - arguments: the token snapshot (tuple[str, ...]).
    - switches / parameters: registered SwitchParameter / ArgumentParameter, in
      registration order.
    - errors: every ParameterErrorEvent raised so far, in order.
    - valid: True until the first error is raised.
    - parsed: whether parse() already ran.
    """

    arguments = mirror("arguments")
    switches = mirror("switches")
    parameters = mirror("parameters")
    errors = mirror("errors")
    listeners = mirror("listeners")

    def __init__(self, arguments, /, *, console=Unset, colorful=False, on_error=Unset):
        if isinstance(arguments, str) or not isinstance(arguments, Iterable):
            raise TypeError("ParameterHandler() argument must be an iterable of strings")
        arguments = tuple(arguments)
        if not all(isinstance(argument, str) for argument in arguments):
            raise TypeError("ParameterHandler() argument must be an iterable of strings")
        if console is not Unset and not isinstance(console, Console):
            raise TypeError("ParameterHandler() 'console' must be a rich console")

        self._arguments = arguments
        self._switches = []
        self._parameters = []
        self._default = Unset
        self._errors = []
        self._listeners = []
        self._valid = True
        self._parsed = False
        self._console = coalesce(console, Console(highlight=False))
        self._colorful = bool(colorful)

        if on_error is not Unset:
            self.subscribe(on_error)

    @property
    def valid(self):
        return self._valid

    @property
    def parsed(self):
        return self._parsed

    @property
    def console(self):
        return self._console

    # --- registration ---

    def _ensure_configurable(self, operation):
        if self._parsed:
            raise RuntimeError(f"{operation}() cannot be called after parse()")

    def _ensure_unique(self, operation, name):
        if not isinstance(name, str) or not name.strip():
            return  # rejected by the parameter itself
        key = name.strip().casefold()
        for parameter in (*self._switches, *self._parameters):
            if parameter.key == key:
                raise ValueError(f"{operation}() name {name!r} is already in use")

    def set_default(self, action, /):
        """
        Store the action receiving tokens that do not start with '-' or '/'.

        The last registration wins.
        """
        self._ensure_configurable("set_default")
        if not callable(action):
            raise TypeError("set_default() argument must be callable")
        self._default = action

    def add_switch(self, name, description=Unset, action=Unset, /):
        """
        Register a presence-only switch and return it.

        Raises
        - ValueError: empty or already registered name.
        - TypeError: missing or non-callable action.
        """
        self._ensure_configurable("add_switch")
        if not name:
            raise ValueError("add_switch() 'name' cannot be empty")
        if not callable(action):
            raise TypeError("add_switch() 'action' must be callable")
        self._ensure_unique("add_switch", name)
        switch = SwitchParameter(name, description, action)
        self._switches.append(switch)
        return switch

    def _add_argument(self, operation, name, description, action, mandatory):
        self._ensure_configurable(operation)
        if not name:
            raise ValueError(f"{operation}() 'name' cannot be empty")
        if not description:
            raise ValueError(f"{operation}() 'description' cannot be empty")
        if not callable(action):
            raise TypeError(f"{operation}() 'action' must be callable")
        self._ensure_unique(operation, name)
        parameter = ArgumentParameter(name, description, mandatory, action)
        self._parameters.append(parameter)
        return parameter

    def add_parameter(self, name, description, action, /):
        """
        Register an optional argument parameter and return it.
        """
        return self._add_argument("add_parameter", name, description, action, False)

    def add_mandatory_parameter(self, name, description, action, /):
        """
        Register an argument parameter that must appear on the command line.
        """
        return self._add_argument("add_mandatory_parameter", name, description, action, True)

    # --- error channel ---

    def subscribe(self, listener, /):
        if not callable(listener):
            raise TypeError("subscribe() argument must be callable")
        self._listeners.append(listener)
        return listener

    def unsubscribe(self, listener, /):
        try:
            self._listeners.remove(listener)
        except ValueError:
            raise ValueError("unsubscribe() argument is not subscribed") from None

    def _raise_error(self, message, /, code, token, index=None):
        event = ParameterErrorEvent(message, code=code, token=token, index=index, colorful=self._colorful)
        logger.debug("parameter error %s: %s", code.name, message)
        self._errors.append(event)
        self._valid = False
        # Snapshot: listeners added during delivery only see later events.
        for listener in tuple(self._listeners):
            listener(event)

    def raise_for_errors(self):
        """
        Raise ParameterExit grouping every recorded error, if there is any.
        """
        if self._errors:
            raise ParameterExit(self._errors, colorful=self._colorful)

    # --- help ---

    def print_help(self):
        """
        Write one line per argument parameter (mandatory ones marked '*'),
        then one line per switch, to the handler's console.

        Line shape: "<marker> -<name padded to 20> <description>"
        """
        styles = defaultdict(str, {
            "marker": "bold #FF4D94",
            "parameter-name": "bold #00E6FF",
            "switch-name": "bold #22C55E",
            "description": "#9CA3AF",
        } | getattr(__import__("__main__"), "__styles__", {}))

        def styler(style):
            return styles[style] if self._colorful else ""

        def line(marker, name, kind, description):
            return Text.assemble(
                (marker, styler("marker")),
                " ",
                (f"-{name:<20}", styler(kind)),
                " ",
                (description, styler("description")),
            )

        for parameter in self._parameters:
            marker = "*" if parameter.mandatory else " "
            self._console.print(line(marker, parameter.name, "parameter-name", parameter.description), soft_wrap=True)

        for switch in self._switches:
            self._console.print(line(" ", switch.name, "switch-name", switch.description), soft_wrap=True)

    # --- parsing ---

    def _find_switch(self, name):
        for switch in self._switches:
            if switch.matches(name):
                return switch
        return None

    def _find_parameter(self, name):
        for parameter in self._parameters:
            if parameter.matches(name):
                return parameter
        return None

    def parse(self):
        """
        Dispatch every token, validate every parameter, and return the errors.

        phases
        - scan: one left-to-right pass with an index cursor.
          • prefixed token, switch name → run the switch (advance 1).
          • prefixed token, not last → run the matching argument parameter with
            the next token (advance 2); unknown name → "not recognised" error
            (advance 1, the next token is scanned on its own).
          • prefixed token, last → "cannot appear at end of command line" error.
          • anything else → default action (advance 1).
        - validation: every argument parameter then every switch.

        returns
        - tuple[ParameterErrorEvent, ...]: the events raised during this pass.

        notes
        - exceptions raised by actions or listeners propagate unchanged.
        """
        self._ensure_configurable("parse")
        self._parsed = True

        index = 0
        while index < len(self._arguments):
            token = self._arguments[index]

            if token.startswith(_PREFIXES):
                name = token[1:].casefold()

                if switch := self._find_switch(name):
                    switch.execute()
                elif index < len(self._arguments) - 1:
                    if parameter := self._find_parameter(name):
                        parameter.execute(self._arguments[index + 1])
                        index += 1
                    else:
                        self._raise_error(
                            f"Parameter {token} not recognised",
                            code=FaultCode.UNRECOGNISED_PARAMETER,
                            token=token,
                            index=index,
                        )
                else:
                    self._raise_error(
                        f"Parameter {token} cannot appear at end of command line",
                        code=FaultCode.TRAILING_PARAMETER,
                        token=token,
                        index=index,
                    )
            elif self._default is not Unset:
                logger.debug("default action receives %r", token)
                self._default(token)
            else:
                self._raise_error(
                    f"Argument {token} not expected",
                    code=FaultCode.UNEXPECTED_ARGUMENT,
                    token=token,
                    index=index,
                )

            index += 1

        for parameter in (*self._parameters, *self._switches):
            success, message = parameter.validate()
            if not success:
                self._raise_error(message, code=FaultCode.MANDATORY_PARAMETER, token=parameter.name)

        return tuple(self._errors)

    def __repr__(self):
        return (
            f"parameter-handler(arguments={self._arguments!r}, "
            f"switches={len(self._switches)}, parameters={len(self._parameters)}, "
            f"parsed={self._parsed!r}, valid={self._valid!r})"
        )


__all__ = (
    "ParameterHandler",
)
