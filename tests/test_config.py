#!/usr/bin/env python3
import unittest
import sys
import os
import logging
from unittest.mock import patch

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from kerbrute.lib.krb5.config import (
	Krb5Config,
	build_krb5_template,
	parse_enctypes,
	split_host_port,
	join_host_port,
)
from kerbrute.utils.errors import ConfigurationError

logging.getLogger('kerbrute').setLevel(logging.CRITICAL)

class TemplateTests(unittest.TestCase):
	def test_dns_template_without_domain_controller(self):
		"""Without a DC the configuration asks for DNS discovery"""
		text = build_krb5_template("EXAMPLE.COM", "")
		self.assertIn("dns_lookup_kdc = true", text)
		self.assertIn("default_realm = EXAMPLE.COM", text)
		self.assertNotIn("[realms]", text)
		self.assertNotRegex(text, r"(?m)^\s*kdc =")

	def test_kdc_template_with_domain_controller(self):
		"""A DC is written verbatim as kdc and admin_server"""
		text = build_krb5_template("EXAMPLE.COM", "dc1.example.com")
		self.assertIn("kdc = dc1.example.com", text)
		self.assertIn("admin_server = dc1.example.com", text)
		self.assertIn("EXAMPLE.COM = {", text)
		self.assertNotIn("dns_lookup_kdc", text)

class ParserTests(unittest.TestCase):
	def test_parse_rendered_kdc_template(self):
		config = Krb5Config.from_string(build_krb5_template("EXAMPLE.COM", "dc1.example.com"))
		self.assertEqual(config.lib_defaults.default_realm, "EXAMPLE.COM")
		self.assertFalse(config.lib_defaults.dns_lookup_kdc)
		self.assertEqual(config.realms["EXAMPLE.COM"].kdc, ["dc1.example.com"])
		self.assertEqual(config.realms["EXAMPLE.COM"].admin_server, ["dc1.example.com"])

	def test_parse_rendered_dns_template(self):
		config = Krb5Config.from_string(build_krb5_template("EXAMPLE.COM"))
		self.assertTrue(config.lib_defaults.dns_lookup_kdc)
		self.assertEqual(config.realms, {})
		self.assertEqual(config.lib_defaults.default_tkt_enctype_ids, [18, 17, 23])

	def test_parse_libdefaults_options(self):
		config = Krb5Config.from_string(
			"# comment\n"
			"[libdefaults]\n"
			"  default_realm = CORP.LOCAL\n"
			"  default_tkt_enctypes = rc4-hmac aes256-cts-hmac-sha1-96\n"
			"  kdc_timeout = 2s\n"
			"  forwardable = true\n"
			"[domain_realm]\n"
			"  .corp.local = CORP.LOCAL\n"
		)
		self.assertEqual(config.lib_defaults.default_tkt_enctype_ids, [23, 18])
		self.assertEqual(config.lib_defaults.kdc_timeout, 2)
		self.assertEqual(config.lib_defaults.extra["forwardable"], "true")

	def test_malformed_configuration_raises(self):
		"""Broken configuration text is a ConfigurationError, never a crash"""
		broken = [
			"default_realm = X\n",
			"[libdefaults\n",
			"[realms]\nEXAMPLE.COM = {\n kdc = a\n",
			"[realms]\nEXAMPLE.COM = a\n",
			"[libdefaults]\ndns_lookup_kdc = maybe\n",
			"[libdefaults]\nno equals sign\n",
		]
		for text in broken:
			with self.subTest(text=text):
				with self.assertRaises(ConfigurationError):
					Krb5Config.from_string(text)

	def test_parse_enctypes(self):
		self.assertEqual(parse_enctypes("arcfour-hmac-md5"), [23])
		self.assertEqual(parse_enctypes("aes256-cts, aes128-cts,rc4-hmac 23"), [18, 17, 23])
		self.assertEqual(parse_enctypes("camellia128-cts-cmac"), [])

class KdcTests(unittest.TestCase):
	def test_explicit_kdc_gets_default_port(self):
		config = Krb5Config.from_string(build_krb5_template("EXAMPLE.COM", "dc1.example.com"))
		self.assertEqual(config.get_kdcs("EXAMPLE.COM"), {1: "dc1.example.com:88"})

	def test_explicit_kdc_keeps_port(self):
		config = Krb5Config.from_string(build_krb5_template("EXAMPLE.COM", "10.0.0.5:8888"))
		self.assertEqual(config.get_kdcs("EXAMPLE.COM"), {1: "10.0.0.5:8888"})

	def test_dns_discovery(self):
		"""KDCs come from SRV records of the realm, indexed from 1"""
		config = Krb5Config.from_string(build_krb5_template("EXAMPLE.COM"))
		with patch('kerbrute.lib.krb5.config.get_kdc_srv_records', return_value=["dc1.example.com:88", "dc2.example.com:88"]) as lookup:
			kdcs = config.get_kdcs("EXAMPLE.COM")
		lookup.assert_called_once_with("EXAMPLE.COM")
		self.assertEqual(kdcs, {1: "dc1.example.com:88", 2: "dc2.example.com:88"})

	def test_dns_discovery_without_answer(self):
		config = Krb5Config.from_string(build_krb5_template("EXAMPLE.COM"))
		with patch('kerbrute.lib.krb5.config.get_kdc_srv_records', return_value=[]):
			with self.assertRaises(ConfigurationError):
				config.get_kdcs("EXAMPLE.COM")

	def test_no_kdc_and_no_dns(self):
		config = Krb5Config.from_string("[libdefaults]\ndefault_realm = EXAMPLE.COM\n")
		with self.assertRaises(ConfigurationError):
			config.get_kdcs("EXAMPLE.COM")

class Socks5Tests(unittest.TestCase):
	def test_enable_socks5(self):
		config = Krb5Config()
		settings = config.enable_socks5("127.0.0.1:1080", "alice", "s3cret")
		self.assertIs(config.socks5, settings)
		self.assertEqual((settings.host, settings.port), ("127.0.0.1", 1080))
		self.assertEqual(settings.username, "alice")
		self.assertNotIn("s3cret", repr(settings))

	def test_enable_socks5_requires_port(self):
		config = Krb5Config()
		for proxy in ("127.0.0.1", "127.0.0.1:notaport", "127.0.0.1:70000"):
			with self.subTest(proxy=proxy):
				with self.assertRaises(ConfigurationError):
					config.enable_socks5(proxy)

class AddressTests(unittest.TestCase):
	def test_split_host_port(self):
		self.assertEqual(split_host_port("dc1"), ("dc1", 88))
		self.assertEqual(split_host_port("dc1:750"), ("dc1", 750))
		self.assertEqual(split_host_port("[fe80::1]:88"), ("fe80::1", 88))
		self.assertEqual(split_host_port("fe80::1"), ("fe80::1", 88))

	def test_join_host_port(self):
		self.assertEqual(join_host_port("dc1", 88), "dc1:88")
		self.assertEqual(join_host_port("fe80::1", 88), "[fe80::1]:88")

if __name__ == '__main__':
	unittest.main()
