# SPDX-License-Identifier: GPL-2.0-or-later

import copy

import pytest

import fwzoneconf.errors
from fwzoneconf.core.fw import Firewall
from fwzoneconf.core.io.fwzoneconf_conf import fwzoneconf_conf
from tests.unit import helpers

ALL_MODIFIED = ["interfaces", "masquerade", "ports", "protocols", "services"]


@pytest.fixture
def backend():
    return helpers.FakeBackend(running=False)


@pytest.fixture
def fw(backend):
    fw = Firewall(backend, interfaces=helpers.INTERFACES)
    assert fw.import_config(helpers.full_config()) is None
    return fw


def expected_zone(**kwargs):
    zone = {
        "interfaces": [],
        "masquerade": False,
        "modified": ALL_MODIFIED,
        "ports": [],
        "protocols": [],
        "services": [],
    }
    zone.update(kwargs)
    return zone


def test_import_export(fw):
    exported = fw.export_config()

    assert exported["logging"] == "off"
    assert exported["start_firewall"] is True
    assert exported["enable_firewall"] is True
    assert exported["external"] == expected_zone(
        masquerade=True,
        interfaces=["eth0", "eth1"],
        services=["ssh"],
        ports=["999/tcp", "1010/udp"],
    )
    assert exported["public"] == expected_zone(
        interfaces=["eth2"], services=["dns"], protocols=["ah"]
    )


def test_import_drops_invalid_settings(fw):
    exported = fw.export_config()

    assert "foozone" not in exported
    assert "invalid_setting" not in exported["dmz"]
    assert exported["dmz"] == expected_zone()
    assert fw.get_zone_of_interface("eth3") is None


def test_import_invalid_values(backend):
    fw = Firewall(backend, warn_unknown_keys=False)
    fw.import_config(
        {
            "logging": "loud",
            "start_firewall": "yes",
            "EXT": {"ports": ["1234:5678/tcp", "bad/tcp"], "masquerade": 1},
            "public": ["not", "a", "mapping"],
        }
    )
    exported = fw.export_config()

    assert exported["logging"] == "off"
    assert exported["start_firewall"] is False
    assert exported["external"] == expected_zone(ports=["1234-5678/tcp"])
    assert "public" not in exported


def test_round_trip(backend):
    conf = {
        "logging": "unicast",
        "start_firewall": False,
        "enable_firewall": True,
        "home": {
            "masquerade": False,
            "interfaces": ["eth1", "tun+"],
            "services": ["mdns", "ssh"],
            "ports": ["8080/tcp", "60000-61000/udp"],
            "protocols": ["esp"],
        },
    }
    fw = Firewall(backend)
    fw.import_config(copy.deepcopy(conf))
    exported = fw.export_config()

    for key in ("logging", "start_firewall", "enable_firewall"):
        assert exported[key] == conf[key]
    for key, value in conf["home"].items():
        assert exported["home"][key] == value


def test_zone_catalog_queries(fw):
    assert fw.is_known_zone("public")
    assert "public" in fw.get_known_firewall_zones()
    assert not fw.is_known_zone("__foobarme__")
    assert "__foobarme__" not in fw.get_known_firewall_zones()
    assert fw.catalog.canonical_name("EXT") == "external"
    assert fw.get_zone_full_name("dmz") == "Demilitarized Zone"
    with pytest.raises(fwzoneconf.errors.UnknownZoneError):
        fw.get_zone_full_name("nogoodzone")


def test_masquerade(fw):
    fw.set_masquerade(True, "public")
    assert fw.get_masquerade("public") is True
    fw.set_masquerade(False, "public")
    assert fw.get_masquerade("public") is False

    fw.set_masquerade(False, "dmz")
    assert fw.get_masquerade("dmz") is False

    fw.set_masquerade(True)
    assert fw.get_masquerade() is True
    fw.set_masquerade(False)
    assert fw.get_masquerade() is False


def test_allowed_services_for_zone_proto(fw):
    assert fw.get_allowed_services_for_zone_proto("external", "tcp") == [
        "999",
        "ssh",
    ]
    assert fw.get_allowed_services_for_zone_proto("external", "udp") == ["1010"]
    assert fw.get_allowed_services_for_zone_proto("public", "ip") == ["ah"]


def test_set_services_on_interface(fw):
    assert fw.set_services(["ssh"], ["eth0"], True) is True
    assert fw.get_services(["ssh"])["ssh"]["external"] is True
    assert fw.is_service_supported_in_zone("ssh", "external")
    assert fw.get_services_in_zones(["ssh"])["ssh"] == {
        "eth0": True,
        "eth1": True,
        "eth2": False,
    }
    assert fw.get_allowed_services_for_zone_proto("external", "tcp") == [
        "999",
        "ssh",
    ]
    assert fw.have_service("ssh", "tcp", "external")

    assert fw.set_services(["ssh"], ["eth0"], False) is True
    assert not fw.have_service("ssh", "tcp", "external")


def test_set_services_legacy_names(fw):
    assert fw.set_services(["service:ntp"], ["eth1"], True) is True
    assert fw.get_services(["service:ntp"])["service:ntp"]["external"] is True
    assert fw.is_service_supported_in_zone("service:ntp", "external")
    assert fw.get_services_in_zones(["service:ntp"])["service:ntp"] == {
        "eth0": True,
        "eth1": True,
        "eth2": False,
    }

    assert fw.set_services(["service:ntp"], ["eth1"], False) is True
    assert fw.get_services(["service:ntp"])["service:ntp"]["external"] is False
    assert not fw.is_service_supported_in_zone("service:ntp", "external")
    assert fw.get_services_in_zones(["service:ntp"])["service:ntp"] == {
        "eth0": False,
        "eth1": False,
        "eth2": False,
    }

    assert fw.set_services(["service:ftp", "ldap"], ["eth0", "eth1"], True)
    assert fw.get_services(["ldap"])["ldap"]["external"] is True
    assert fw.get_services(["service:ftp"])["service:ftp"]["public"] is False


def test_set_services_for_zones(fw):
    assert fw.set_services_for_zones(["service:ntp"], ["external"], True) is True
    assert fw.get_services_in_zones(["service:ntp"])["service:ntp"] == {
        "eth0": True,
        "eth1": True,
        "eth2": False,
    }
    assert fw.set_services_for_zones(["ntp"], ["EXT"], False) is True
    assert not fw.is_service_supported_in_zone("ntp", "external")

    assert fw.set_services_for_zones(["ntp"], ["external", "foozone"], True) is False
    assert not fw.is_service_supported_in_zone("ntp", "external")


def test_set_services_invalid_interface(fw):
    before = fw.export_config()
    assert fw.set_services(["dns"], ["ethfoobar"], True) is False
    assert fw.set_services(["dns"], ["eth0", "ethfoobar"], True) is False
    assert fw.export_config() == before


def test_set_services_unknown_service(fw, backend):
    backend.running = True
    backend.services = {"ssh": (["22/tcp"], []), "ntp": (["123/udp"], [])}
    before = fw.export_config()

    with pytest.raises(fwzoneconf.errors.ServiceNotFoundError, match="Service with name") as exc:
        fw.set_services(["foobar"], ["eth0"], True)
    assert exc.value.service == "foobar"
    assert fw.export_config() == before

    with pytest.raises(fwzoneconf.errors.ServiceNotFoundError):
        fw.add_service("foobar", "tcp", "external")

    # not running, nothing is checked
    backend.running = False
    fw.cleanup()
    fw.import_config(helpers.full_config())
    assert fw.set_services(["foobar"], ["eth0"], True) is True


def test_add_remove_service(fw):
    assert fw.add_service("telnet", "TCP", "external") is True
    assert fw.have_service("telnet", "TCP", "external") is True
    assert fw.remove_service("telnet", "TCP", "external") is True
    assert fw.have_service("telnet", "TCP", "external") is False

    # by interface
    assert fw.add_service("service:ntp", "udp", "eth2") is True
    assert fw.is_service_supported_in_zone("ntp", "public")

    # ports and IP protocols
    assert fw.add_service("8080", "tcp", "public") is True
    assert fw.have_service("8080", "TCP", "public")
    assert not fw.have_service("8080", "udp", "public")
    assert fw.add_service("esp", "ip", "public") is True
    assert fw.get_additional_services("ip", "public") == ["ah", "esp"]
    assert fw.remove_service("8080", "tcp", "public") is True
    assert fw.get_additional_services("tcp", "public") == []

    assert fw.add_service("ssh", "tcp", "ethfoobar") is False
    assert fw.add_service("22", "icmp", "public") is False


def test_additional_services(fw):
    assert fw.get_additional_services("tcp", "external") == ["999"]
    assert fw.get_additional_services("ip", "public") == ["ah"]

    assert fw.set_additional_services("tcp", "public", ["1234"]) is True
    assert fw.get_additional_services("tcp", "public") == ["1234"]

    fw.set_additional_services("tcp", "public", ["5678"])
    assert fw.get_additional_services("tcp", "public") == ["5678"]

    fw.set_additional_services("tcp", "public", ["1234-5678"])
    assert fw.get_additional_services("tcp", "public") == ["1234-5678"]

    fw.set_additional_services("udp", "public", ["53"])
    assert fw.get_additional_services("udp", "public") == ["53"]
    assert fw.get_additional_services("tcp", "public") == ["1234-5678"]

    fw.set_additional_services("tcp", "public", ["1234:5678"])
    assert fw.get_additional_services("tcp", "public") == ["1234-5678"]
    assert fw.get_additional_services("udp", "public") == ["53"]

    assert fw.set_additional_services("tcp", "public", ["1", "bad port"]) is False
    assert fw.get_additional_services("tcp", "public") == ["1234-5678"]

    fw.set_additional_services("ip", "public", ["esp"])
    assert fw.get_additional_services("ip", "public") == ["esp"]


def test_additional_services_excludes_known_names(fw, backend):
    backend.running = True
    backend.services["999"] = (["999/tcp"], [])
    assert fw.get_additional_services("tcp", "external") == []


def test_interfaces(fw):
    assert fw.add_interface_into_zone("eth4", "external") is True
    assert fw.get_interfaces_in_zone("external") == ["eth0", "eth1", "eth4"]

    fw.add_interface_into_zone("eth2", "dmz")
    assert fw.get_interfaces_in_zone("dmz") == ["eth2"]
    assert fw.get_interfaces_in_zone("public") == []

    fw.remove_interface_from_zone("eth2", "dmz")
    assert fw.get_interfaces_in_zone("dmz") == []

    assert fw.add_special_interface_into_zone("tun+", "dmz") is True
    assert "tun+" in fw.get_special_interfaces_in_zone("dmz")
    assert fw.add_special_interface_into_zone("tun0", "dmz") is False

    assert fw.add_interface_into_zone("wlan7", "dmz") is False
    assert fw.get_zone_of_interface("wlan7") is None


def test_interfaces_unknown_zone(fw):
    with pytest.raises(fwzoneconf.errors.UnknownZoneError):
        fw.add_interface_into_zone("eth2", "nogoodzone")
    assert fw.get_interfaces_in_zone("nogoodzone") == []
    assert fw.get_interfaces_in_zone("public") == ["eth2"]


def test_zones_of_interfaces(fw):
    assert fw.get_zones_of_interfaces(["eth0", "eth2", "eth1"]) == [
        "external",
        "public",
    ]
    assert fw.get_zones_of_interfaces(["eth0", "eth4"]) == ["external"]
    assert fw.get_zones_of_interfaces(["eth4"]) is None


def test_logging(fw):
    fw.set_logging_settings(None, "multicast")
    assert fw.get_logging_settings(None) == "multicast"
    assert fw.is_log_denied_modified()

    fw.set_ignore_logging_broadcast(None, "yes")
    assert fw.get_ignore_logging_broadcast(None) == "yes"

    with pytest.raises(fwzoneconf.errors.FirewallError) as exc:
        fw.set_logging_settings("public", "loud")
    helpers.assert_firewall_error(exc.value, code=fwzoneconf.errors.INVALID_VALUE)
    with pytest.raises(fwzoneconf.errors.FirewallError):
        fw.set_ignore_logging_broadcast(None, "maybe")


def test_start_enable_flags(backend):
    fw = Firewall(backend)
    assert fw.get_start_at_boot() is False
    fw.set_start_at_boot(True)
    fw.set_enable_service(True)
    assert fw.get_start_at_boot() is True
    assert fw.get_enable_service() is True

    assert fw.is_started() is False
    backend.running = True
    # cached for the session
    assert fw.is_started() is False


def test_read(backend):
    backend.zones["external"]["interfaces"] = ["eth0", "tun+"]
    backend.zones["external"]["ports"] = ["1234:5678/tcp", "999/udp"]
    backend.zones["external"]["masquerade"] = True
    backend.zones["public"]["services"] = ["ssh", "dhcpv6-client"]
    backend.zones["public"]["protocols"] = ["ah"]
    backend.zones["libvirt"] = dict(backend.zones["work"])
    backend.log_denied = "unicast"

    fw = Firewall(backend)
    fw.import_config(helpers.full_config())
    fw.read()

    exported = fw.export_config()
    assert "libvirt" not in exported
    assert exported["logging"] == "unicast"
    assert exported["external"] == expected_zone(
        interfaces=["eth0", "tun+"],
        masquerade=True,
        ports=["1234-5678/tcp", "999/udp"],
        modified=[],
    )
    assert exported["public"]["services"] == ["ssh", "dhcpv6-client"]
    assert fw.get_special_interfaces_in_zone("external") == ["tun+"]
    for zone in fw.get_known_firewall_zones():
        assert fw.zone.get_modified(zone) == set()


def test_write(fw, backend):
    assert fw.write() is True

    assert backend.zones["external"] == {
        "interfaces": ["eth0", "eth1"],
        "services": ["ssh"],
        "ports": ["999/tcp", "1010/udp"],
        "protocols": [],
        "masquerade": True,
    }
    assert backend.zones["public"]["protocols"] == ["ah"]
    assert fw.zone.get_dirty_zones() == []

    # nothing left to do
    del backend.calls[:]
    assert fw.write() is True
    assert backend.changes() == []


def test_write_order(backend):
    fw = Firewall(backend)
    backend.zones["public"]["services"] = ["dhcpv6-client"]
    fw.import_config(
        {
            "public": {"services": ["ssh"], "interfaces": ["eth0"]},
            "dmz": {"ports": ["22/tcp"], "masquerade": True},
        }
    )
    fw.write()

    assert backend.changes() == [
        ("add_masquerade", "dmz"),
        ("add_port", "dmz", "22/tcp"),
        ("add_interface", "public", "eth0"),
        ("remove_service", "public", "dhcpv6-client"),
        ("add_service", "public", "ssh"),
    ]


def test_write_only_modified(backend):
    fw = Firewall(backend)
    fw.read()
    fw.set_services_for_zones(["ssh"], ["public"], True)
    assert fw.zone.get_modified("public") == {"services"}

    fw.write()
    assert backend.changes() == [("add_service", "public", "ssh")]
    assert [call[0] for call in backend.calls if call[0].startswith("list_")][-1:] == [
        "list_services"
    ]
    assert fw.zone.get_modified("public") == set()


def test_write_moves_interface(backend):
    backend.zones["public"]["interfaces"] = ["eth0"]
    fw = Firewall(backend)
    fw.read()
    fw.add_interface_into_zone("eth0", "dmz")
    assert fw.zone.get_modified("public") == {"interfaces"}
    assert fw.zone.get_modified("dmz") == {"interfaces"}

    assert fw.write() is True
    assert backend.zones["dmz"]["interfaces"] == ["eth0"]
    assert backend.zones["public"]["interfaces"] == []


def test_write_failure_keeps_modified(fw, backend):
    backend.refuse.add(("add_service", "ssh"))

    assert fw.write() is False
    assert fw.zone.get_modified("external") == {"services"}
    assert fw.zone.get_modified("public") == set()
    assert backend.zones["external"]["ports"] == ["999/tcp", "1010/udp"]

    backend.refuse.clear()
    del backend.calls[:]
    assert fw.write() is True
    assert backend.changes() == [("add_service", "external", "ssh")]


def test_write_backend_error(fw, backend):
    backend.broken.add("add_port")

    with pytest.raises(fwzoneconf.errors.BackendCommandError):
        fw.write()
    assert "ports" in fw.zone.get_modified("external")


def test_write_log_denied_and_reload(fw, backend):
    backend.running = True
    fw.set_logging_settings(None, "all")

    assert fw.write() is True
    assert backend.log_denied == "all"
    assert not fw.is_log_denied_modified()
    assert ("reload",) in backend.calls

    del backend.calls[:]
    assert fw.write() is True
    assert ("reload",) not in backend.calls


def test_write_no_reload(backend):
    backend.running = True
    fw = Firewall(backend, reload_after_write=False)
    fw.set_masquerade(True, "work")
    assert fw.write() is True
    assert ("reload",) not in backend.calls


def test_dirty_tracking_after_mutations(backend):
    fw = Firewall(backend, interfaces=helpers.INTERFACES)
    fw.read()
    for zone in fw.get_known_firewall_zones():
        assert fw.zone.get_modified(zone) == set()

    fw.add_interface_into_zone("eth0", "external")
    fw.set_services(["ssh"], ["eth0"], True)
    fw.set_masquerade(True, "external")
    assert fw.zone.get_modified("external") == {
        "interfaces",
        "services",
        "masquerade",
    }

    assert fw.write() is True
    assert fw.zone.get_modified("external") == set()


def test_from_conf(tmp_path):
    filename = tmp_path / "fwzoneconf.conf"
    filename.write_text(
        "# test\nBackend=firewall-cmd\nFirewallCmd=/opt/bin/firewall-cmd\n"
        "Permanent=no\nReloadAfterWrite=no\nLogDenied=unicast\n"
    )
    conf = fwzoneconf_conf(str(filename))
    conf.read()

    fw = Firewall.from_conf(conf, interfaces=["eth0"])
    assert fw.backend.name == "firewall-cmd"
    assert fw.backend.permanent is False
    assert fw.backend._command == "/opt/bin/firewall-cmd"
    assert fw.get_logging_settings() == "unicast"
    assert fw.add_interface_into_zone("eth1", "public") is False


def test_from_conf_defaults():
    fw = Firewall.from_conf(fwzoneconf_conf("/file/name/nowhere"))
    assert fw.backend.name == "firewall-cmd"
    assert fw.backend.permanent is True
    assert fw.get_logging_settings() == "off"


def test_reversed_port_range(backend):
    fw = Firewall(backend)
    fw.import_config({"public": {"ports": ["5678:1234/tcp", "80-80/udp"]}})
    assert fw.export_config()["public"]["ports"] == ["1234-5678/tcp", "80/udp"]

    assert fw.write() is True
    assert backend.zones["public"]["ports"] == ["1234-5678/tcp", "80/udp"]

    # nothing left to do once the backend has the ranges
    backend.calls = []
    fw.zone.mark_dirty("public", "ports")
    assert fw.write() is True
    assert backend.changes() == []


def test_invalid_service_names(fw):
    before = fw.export_config()

    assert fw.set_services_for_zones(["bad name;rm"], ["public"], True) is False
    assert fw.set_services(["bad name;rm"], ["eth0"], True) is False
    assert fw.add_service("foo/bar", "tcp", "public") is False
    assert fw.add_service("service:bad name", "tcp", "eth0") is False
    assert fw.remove_service("foo/bar", "tcp", "public") is False
    assert fw.export_config() == before


def test_read_failure_keeps_model(fw, backend):
    before = fw.export_config()
    backend.broken = {"list_ports"}

    with pytest.raises(fwzoneconf.errors.BackendCommandError):
        fw.read()
    assert fw.export_config() == before
    assert fw.zone.get_dirty_zones() == ["dmz", "external", "public"]


def test_ignore_logging_broadcast_round_trip(backend):
    fw = Firewall(backend)
    assert fw.export_config()["ignore_logging_broadcast"] == "yes"

    fw.import_config({"ignore_logging_broadcast": "no"})
    assert fw.export_config()["ignore_logging_broadcast"] == "no"

    fw.import_config({"ignore_logging_broadcast": "maybe"})
    assert fw.get_ignore_logging_broadcast() == "no"
