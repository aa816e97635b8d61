#!/usr/bin/env python3
# tests/test_main.py - Unit tests for main.py (process entry point)

import pytest
import os
import sys
from unittest.mock import patch

# Add src directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

gi = pytest.importorskip('gi')
try:
    gi.require_version('IBus', '1.0')
    from gi.repository import IBus
except (ImportError, ValueError):
    pytest.skip('IBus typelib is not available', allow_module_level=True)

import main


@pytest.fixture
def entry_point(tmp_path):
    """Patch everything main() touches outside of the process"""
    config_dir = str(tmp_path / 'ibus-nepali-smart')
    with patch('util.get_user_config_dir', return_value=config_dir), \
            patch('main.os.umask'), \
            patch('main.IBus') as ibus, \
            patch('main.IMApp') as app:
        yield {'config_dir': config_dir, 'IBus': ibus, 'IMApp': app}


class TestIMApp:

    def test_exec_by_ibus_must_be_bool(self):
        with pytest.raises(TypeError):
            main.IMApp('yes')

    def test_not_connected(self):
        with patch('main.IBus') as ibus, patch('main.GLib'):
            ibus.Bus.return_value.is_connected.return_value = False
            with pytest.raises(ConnectionError):
                main.IMApp(True)
            ibus.Factory.new.assert_not_called()

    def test_exec_by_ibus_requests_name(self):
        with patch('main.IBus') as ibus, patch('main.GLib'), patch('main.GObject'):
            bus = ibus.Bus.return_value
            bus.is_connected.return_value = True
            main.IMApp(True)
        bus.request_name.assert_called_once_with(main.BUS_NAME, 0)
        bus.register_component.assert_not_called()
        ibus.Factory.new.return_value.add_engine.assert_called_once()
        assert ibus.Factory.new.return_value.add_engine.call_args[0][0] == 'nepali-smart'

    def test_standalone_registers_component(self):
        with patch('main.IBus') as ibus, patch('main.GLib'), patch('main.GObject'):
            bus = ibus.Bus.return_value
            bus.is_connected.return_value = True
            main.IMApp(False)
        bus.request_name.assert_not_called()
        bus.register_component.assert_called_once_with(ibus.Component.return_value)
        bus.set_global_engine_async.assert_called_once()
        assert ibus.EngineDesc.call_args[1]['name'] == 'nepali-smart'
        assert ibus.EngineDesc.call_args[1]['language'] == 'ne'

    def test_disconnect_quits_main_loop(self):
        with patch('main.IBus') as ibus, patch('main.GLib') as glib, patch('main.GObject'):
            ibus.Bus.return_value.is_connected.return_value = True
            app = main.IMApp(True)
            app._bus_disconnected_cb()
        glib.MainLoop.return_value.quit.assert_called_once_with()


class TestMain:

    def test_ibus_flag(self, entry_point):
        with patch('sys.argv', ['ibus-engine-nepali-smart', '--ibus']):
            main.main()
        entry_point['IBus'].init.assert_called_once_with()
        entry_point['IMApp'].assert_called_once_with(True)
        entry_point['IMApp'].return_value.run.assert_called_once_with()
        # first run writes the default config
        assert os.path.exists(os.path.join(entry_point['config_dir'], 'config.json'))

    def test_standalone(self, entry_point):
        with patch('sys.argv', ['ibus-engine-nepali-smart']):
            main.main()
        entry_point['IMApp'].assert_called_once_with(False)

    def test_connection_failure_exits_with_1(self, entry_point):
        entry_point['IMApp'].side_effect = ConnectionError('Could not connect to the IBus daemon.')
        with patch('sys.argv', ['ibus-engine-nepali-smart', '-i']):
            with pytest.raises(SystemExit) as e:
                main.main()
        assert e.value.code == 1

    def test_help(self, entry_point, capsys):
        with patch('sys.argv', ['ibus-engine-nepali-smart', '-h']):
            with pytest.raises(SystemExit) as e:
                main.main()
        assert e.value.code == 0
        assert '--ibus' in capsys.readouterr().out
        entry_point['IMApp'].assert_not_called()

    def test_unknown_option(self, entry_point):
        with patch('sys.argv', ['ibus-engine-nepali-smart', '--bogus']):
            with pytest.raises(SystemExit) as e:
                main.main()
        assert e.value.code == 1
