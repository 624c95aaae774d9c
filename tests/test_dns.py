#!/usr/bin/env python3
import unittest
import sys
import os
from unittest.mock import patch, MagicMock

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import dns.exception
import dns.resolver

from kerbrute.lib.dns import get_kdc_srv_records

def srv(target, port=88, priority=0, weight=100):
	record = MagicMock()
	record.target = target
	record.port = port
	record.priority = priority
	record.weight = weight
	return record

class SrvLookupTests(unittest.TestCase):
	@patch('dns.resolver.Resolver')
	def test_ordering(self, Resolver):
		"""Records are sorted by priority, then by heaviest weight"""
		Resolver.return_value.resolve.return_value = [
			srv("dc3.example.com.", priority=10),
			srv("dc2.example.com.", weight=10),
			srv("dc1.example.com.", port=750, weight=50),
		]
		kdcs = get_kdc_srv_records("EXAMPLE.COM")
		self.assertEqual(kdcs, ["dc1.example.com:750", "dc2.example.com:88", "dc3.example.com:88"])
		Resolver.return_value.resolve.assert_called_once_with('_kerberos._tcp.EXAMPLE.COM', 'SRV', tcp=True)

	@patch('dns.resolver.Resolver')
	def test_udp_fallback(self, Resolver):
		Resolver.return_value.resolve.side_effect = [
			dns.resolver.NXDOMAIN(),
			[srv("dc1.example.com.")],
		]
		self.assertEqual(get_kdc_srv_records("EXAMPLE.COM"), ["dc1.example.com:88"])
		self.assertEqual(Resolver.return_value.resolve.call_args[0][0], '_kerberos._udp.EXAMPLE.COM')

	@patch('dns.resolver.Resolver')
	def test_nothing_found(self, Resolver):
		Resolver.return_value.resolve.side_effect = [dns.resolver.NoAnswer(), dns.exception.Timeout()]
		self.assertEqual(get_kdc_srv_records("EXAMPLE.COM"), [])

	@patch('dns.resolver.Resolver')
	def test_custom_nameserver(self, Resolver):
		Resolver.return_value.resolve.return_value = [srv("dc1.example.com.")]
		get_kdc_srv_records("EXAMPLE.COM", nameserver="10.0.0.1")
		Resolver.assert_called_once_with(configure=False)
		self.assertEqual(Resolver.return_value.nameservers, ["10.0.0.1"])

if __name__ == '__main__':
	unittest.main()
