"""
main.py - Entry point for the Nepali Smart IME engine

================================================================================
WHAT THIS FILE DOES
================================================================================

This is the process that IBus starts when the user selects the engine:

    IBus daemon starts this script (with --ibus)
            ↓
    This script connects to the bus and registers the engine factory
            ↓
    One EngineNepaliSmart is created per input context
            ↓
    The GLib main loop delivers key events until the bus disconnects

Two execution modes exist:

    --ibus      IBus started us and already knows the component; we only
                claim our D-Bus name.
    (default)   Standalone/development; we describe and register the
                component ourselves and make the engine the global one.

Failing to connect to the IBus daemon is fatal (exit status 1).

User data lives in ~/.config/ibus-nepali-smart/:

    config.json               user settings
    ibus-nepali-smart.log     log file
    user_dictionary.json      learned words (dictionary backend)

================================================================================
"""

from engine import EngineNepaliSmart  # registers the GType looked up below
import util

import getopt
import gettext
import locale
import logging
import os
import sys

import gi
gi.require_version('IBus', '1.0')
from gi.repository import GLib, GObject, IBus

logger = logging.getLogger(__name__)

ENGINE_NAME = 'nepali-smart'
BUS_NAME = 'org.freedesktop.IBus.NepaliSmart'


class IMApp:
    """
    The IBus application: bus connection, engine factory and main loop.

    Attributes:
        exec_by_ibus : bool
            True if started by IBus daemon, False if running standalone.
        _mainloop : GLib.MainLoop
        _bus : IBus.Bus
        _factory : IBus.Factory
            Creates EngineNepaliSmart instances when IBus asks for one.
        _component : IBus.Component (standalone mode only)
    """

    def __init__(self, exec_by_ibus: bool) -> None:
        """
        Initialize the IBus application and register the engine.

        Args:
            exec_by_ibus (bool): True if started by IBus daemon, False for standalone.

        Raises:
            TypeError: If exec_by_ibus is not a boolean.
            ConnectionError: If the IBus daemon cannot be reached.
        """
        if not isinstance(exec_by_ibus, bool):
            raise TypeError("The `exec_by_ibus` parameter must be a boolean value.")
        self.exec_by_ibus = exec_by_ibus

        self._mainloop = GLib.MainLoop()
        self._bus = IBus.Bus()
        if not self._bus.is_connected():
            raise ConnectionError("Could not connect to the IBus daemon.")
        self._bus.connect("disconnected", self._bus_disconnected_cb)
        self._factory = IBus.Factory.new(self._bus.get_connection())
        self._factory.add_engine(ENGINE_NAME, GObject.type_from_name("EngineNepaliSmart"))
        if exec_by_ibus:
            self._bus.request_name(BUS_NAME, 0)
        else:
            self._component = IBus.Component(
                name=BUS_NAME,
                description="Nepali Smart IME",
                version=util.get_version(),
                license="MIT",
                author="ibus-nepali-smart contributors",
                homepage="https://github.com/" + util.get_package_name(),
                textdomain=util.get_package_name())
            engine = IBus.EngineDesc(
                name=ENGINE_NAME,
                longname="Nepali Smart",
                description="Romanized Nepali to Devanagari with suggestions",
                language="ne",
                license="MIT",
                author="ibus-nepali-smart contributors",
                icon=util.get_package_name(),
                layout="default")
            self._component.add_engine(engine)
            self._bus.register_component(self._component)
            self._bus.set_global_engine_async(ENGINE_NAME, -1, None, None, None)

    def run(self):
        self._mainloop.run()

    def _bus_disconnected_cb(self, bus=None):
        logger.info('IBus disconnected')
        self._mainloop.quit()


def print_help(v: int = 0) -> None:
    """
    Print command-line usage help and exit.

    Args:
        v (int): Exit code. 0 for normal help request, 1 for error.
    """
    print("-i, --ibus             executed by IBus.")
    print("-h, --help             show this message.")
    print("-d, --daemonize        daemonize ibus")
    sys.exit(v)


def main():
    try:
        locale.bindtextdomain(util.get_package_name(), util.get_localedir())
    except AttributeError:
        # not available on every platform
        pass
    gettext.bindtextdomain(util.get_package_name(), util.get_localedir())
    os.umask(0o077)

    # Create user specific data directory
    user_configdir = util.get_user_config_dir()
    os.makedirs(user_configdir, 0o700, True)

    # logging settings
    logfile_name = os.path.join(user_configdir, util.get_package_name() + '.log')
    logging.basicConfig(filename=logfile_name, level=logging.WARNING, format='%(asctime)s %(levelname)-8s %(message)s', datefmt='%Y-%m-%d %H:%M:%S')

    # writes the default config.json on the first run
    config, warnings = util.get_config_data()
    logging.getLogger().setLevel(util.NAME_TO_LOGGING_LEVEL[util.get_logging_level(config)])
    logger.info(f'user_configdir: {user_configdir}')
    logger.info(f'backend: {config["backend"]}')

    exec_by_ibus = False
    daemonize = False

    shortopt = "ihd"
    longopt = ["ibus", "help", "daemonize"]

    try:
        opts, args = getopt.getopt(sys.argv[1:], shortopt, longopt)
    except getopt.GetoptError as err:
        logger.error(err)
        sys.exit(1)

    # argparse does not cope with the arguments IBus passes
    for o, a in opts:
        if o in ("-h", "--help"):
            print_help(0)
        elif o in ("-d", "--daemonize"):
            daemonize = True
        elif o in ("-i", "--ibus"):
            exec_by_ibus = True
        else:
            sys.stderr.write("Unknown argument: %s\n" % o)
            print_help(1)
    logger.info(f'daemonize? : {daemonize}')
    logger.info(f'IBus exec? : {exec_by_ibus}')

    if daemonize:
        if os.fork():
            sys.exit()
    IBus.init()
    try:
        app = IMApp(exec_by_ibus)
    except ConnectionError as e:
        logger.error(e)
        sys.stderr.write(f"{e}\n")
        sys.exit(1)
    app.run()


if __name__ == "__main__":
    main()
