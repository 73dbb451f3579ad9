"""
Switchyard program layer: the analysis driver's command line.

This module wires a ParameterHandler for the source-analysis driver:

    -settings <file>   settings file to load (mandatory)
    -cache / -nocache  turn result caching on / off
    -path <dir>        add a path to load add-ins from (repeatable)
    -define <name>     define a constant (repeatable)
    -project <file>    project file
    -xml <file>        save the report to an xml file
    -xsl <file>        xsl file used to transform the xml report
    -help / -?         display parameter help
    <file> ...         source files to analyse

The analysis itself is not performed here; main() stops once the options are
collected and validated.
"""
import logging
import sys

from rich.console import Console
from rich.logging import RichHandler
from rich.pretty import Pretty
from rich.text import Text

from .handler import ParameterHandler
from .utils import Unset, coalesce

logger = logging.getLogger(__name__)


class DriverOptions:
    """
    Options collected from the command line for one analysis run.
    """

    def __init__(self):
        self.settings_file = ""
        self.cache_results = False
        self.addin_paths = []
        self.define_constants = []
        self.project_file = None
        self.save_xml = None
        self.xsl = None
        self.source_files = []

    def __rich_repr__(self):
        yield "settings_file", self.settings_file
        yield "cache_results", self.cache_results
        yield "addin_paths", self.addin_paths
        yield "define_constants", self.define_constants
        yield "project_file", self.project_file
        yield "save_xml", self.save_xml
        yield "xsl", self.xsl
        yield "source_files", self.source_files

    def __repr__(self):
        return "driver-options(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())


def _setter(options, name):
    def setter(value):
        setattr(options, name, value)
    return setter


def build_handler(options, arguments, /, *, console=Unset):
    """
    Return a ParameterHandler registering every driver parameter against options.
    """
    handler = ParameterHandler(arguments, console=console)

    handler.add_switch("help", "Display parameter help", handler.print_help)
    handler.add_switch("?", "Display parameter help", handler.print_help)

    handler.add_mandatory_parameter("settings", "Specify the settings file to load", _setter(options, "settings_file"))

    handler.add_switch("cache", "Turn on caching", lambda: setattr(options, "cache_results", True))
    handler.add_switch("nocache", "Turn off caching", lambda: setattr(options, "cache_results", False))

    handler.add_parameter("path", "Add path to load addins", options.addin_paths.append)
    handler.add_parameter("define", "Define constant", options.define_constants.append)

    handler.add_parameter("project", "Specify the project file", _setter(options, "project_file"))

    handler.add_parameter("xml", "Save to xml file", _setter(options, "save_xml"))
    handler.add_parameter("xsl", "Specify xsl file to transform xml", _setter(options, "xsl"))

    handler.set_default(options.source_files.append)
    return handler


def configure(options, arguments, /, *, console=Unset):
    """
    Fill options from the command line.

    Every parameter error is printed as "Parameter Error: <message>".
    Returns False when any error was raised, True otherwise.
    """
    console = coalesce(console, Console(highlight=False))
    handler = build_handler(options, arguments, console=console)
    handler.subscribe(lambda event: console.print(Text(f"Parameter Error: {event.message}"), soft_wrap=True))
    handler.parse()
    if not handler.valid:
        logger.debug("configuration rejected with %d error(s)", len(handler.errors))
    return handler.valid


def validate_configuration(options, /, *, console=Unset):
    """
    Check the collected options can drive an analysis run.
    """
    console = coalesce(console, Console(highlight=False))
    if not options.settings_file:
        console.print(Text("No settings file specified (-settings)"), soft_wrap=True)
        return False
    return True


def main(argv=None, /, *, console=Unset):
    """
    Program entry point; returns the process exit code.
    """
    console = coalesce(console, Console(highlight=False))
    options = DriverOptions()
    if not configure(options, sys.argv[1:] if argv is None else argv, console=console):
        return 1
    if not validate_configuration(options, console=console):
        return 1
    console.print(Pretty(options))
    return 0


def run(argv=None, /, *, console=Unset):
    """
    Console entry point: install rich logging, run main() and exit with its code.
    """
    logging.basicConfig(level=logging.WARNING, format="%(message)s", handlers=[RichHandler(show_path=False)])
    sys.exit(main(argv, console=console))


__all__ = (
    "DriverOptions",
    "build_handler",
    "configure",
    "validate_configuration",
    "main",
    "run",
)
