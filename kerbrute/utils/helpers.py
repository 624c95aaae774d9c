import os
import sys
import ipaddress

import validators

def is_ipaddress(address):
	try:
		ipaddress.ip_address(address)
		return True
	except ValueError:
		return False

def is_valid_fqdn(hostname: str) -> bool:
	if validators.domain(hostname):
		return True
	else:
		return False

def read_lines(path):
	"""
	Yield the lines of a wordlist without line endings. "-" reads stdin.
	"""
	if path == '-':
		for line in sys.stdin:
			yield line.rstrip("\r\n")
		return

	with open(os.path.expanduser(path), 'r', encoding='utf-8', errors='replace') as f:
		for line in f:
			yield line.rstrip("\r\n")

def strip_domain(username):
	"""user@domain -> user"""
	if '@' in username:
		return username.split('@', 1)[0]
	return username

def parse_combo(line, separator=':'):
	"""
	Split a "username:password" line. The password may contain the separator.

	Returns:
		tuple: (username, password) or None if the line is malformed
	"""
	username, sep, password = line.partition(separator)
	if not sep or not username:
		return None
	return username, password

def validate_proxy(value):
	"""argparse type for host:port"""
	host, sep, port = value.rpartition(':')
	if not sep or not host or not port.isdigit() or not 0 < int(port) < 65536:
		raise ValueError(f"Invalid SOCKS5 proxy {value}, expected host:port")
	return value
