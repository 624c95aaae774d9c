#!/usr/bin/env python3
import logging

import jinja2

from kerbrute.lib.dns import get_kdc_srv_records
from kerbrute.utils.errors import ConfigurationError

LOG = logging.getLogger('kerbrute.config')

KRB5_CONFIG_TEMPLATE_DNS = """[libdefaults]
dns_lookup_kdc = true
default_realm = {{ realm }}
"""

KRB5_CONFIG_TEMPLATE_KDC = """[libdefaults]
default_realm = {{ realm }}
[realms]
{{ realm }} = {
	kdc = {{ domain_controller }}
	admin_server = {{ domain_controller }}
}
"""

DEFAULT_KDC_PORT = 88
DEFAULT_KDC_TIMEOUT = 5

# https://web.mit.edu/kerberos/krb5-latest/doc/admin/enctypes.html
ENCTYPE_IDS = {
	'des-cbc-crc': 1,
	'des-cbc-md5': 3,
	'des3-cbc-sha1': 16,
	'des3-hmac-sha1': 16,
	'des3-cbc-sha1-kd': 16,
	'aes128-cts-hmac-sha1-96': 17,
	'aes128-cts': 17,
	'aes128-sha1': 17,
	'aes256-cts-hmac-sha1-96': 18,
	'aes256-cts': 18,
	'aes256-sha1': 18,
	'arcfour-hmac': 23,
	'arcfour-hmac-md5': 23,
	'rc4-hmac': 23,
}

DEFAULT_TKT_ENCTYPE_IDS = [18, 17, 23]
RC4_HMAC = 23

_template_env = jinja2.Environment(
	undefined=jinja2.StrictUndefined,
	keep_trailing_newline=True,
	autoescape=False,
)

def build_krb5_template(realm, domain_controller=None):
	"""
	Render the realm configuration text.

	Without a domain controller the KDCs are discovered through DNS, otherwise
	the host is written as both kdc and admin_server of the realm.
	"""
	if domain_controller:
		source = KRB5_CONFIG_TEMPLATE_KDC
	else:
		source = KRB5_CONFIG_TEMPLATE_DNS
	try:
		return _template_env.from_string(source).render(realm=realm, domain_controller=domain_controller)
	except jinja2.TemplateError as e:
		raise ConfigurationError(f"Could not render krb5 configuration: {e}")

def parse_bool(value):
	value = value.strip().lower()
	if value in ('true', 'yes', 'on', '1'):
		return True
	if value in ('false', 'no', 'off', '0'):
		return False
	raise ConfigurationError(f"Invalid boolean value: {value}")

def parse_enctypes(value):
	ids = []
	for name in value.replace(',', ' ').split():
		name = name.lower()
		if name.isdigit():
			etype = int(name)
		elif name in ENCTYPE_IDS:
			etype = ENCTYPE_IDS[name]
		else:
			LOG.debug(f"Ignoring unknown encryption type {name}")
			continue
		if etype not in ids:
			ids.append(etype)
	return ids

def split_host_port(address, default_port=DEFAULT_KDC_PORT):
	address = address.strip()
	if address.startswith('['):
		host, _, rest = address[1:].partition(']')
		port = rest[1:] if rest.startswith(':') else ''
	elif address.count(':') == 1:
		host, port = address.split(':')
	else:
		host, port = address, ''

	if not host:
		raise ConfigurationError(f"Invalid address: {address}")
	if not port:
		return host, default_port
	try:
		port = int(port)
	except ValueError:
		raise ConfigurationError(f"Invalid port in address: {address}")
	if not 0 < port < 65536:
		raise ConfigurationError(f"Invalid port in address: {address}")
	return host, port

def join_host_port(host, port):
	if ':' in host:
		return f"[{host}]:{port}"
	return f"{host}:{port}"

class LibDefaults:
	def __init__(self):
		self.default_realm = None
		self.dns_lookup_kdc = False
		self.default_tkt_enctype_ids = list(DEFAULT_TKT_ENCTYPE_IDS)
		self.kdc_timeout = DEFAULT_KDC_TIMEOUT
		self.extra = {}

	def set(self, key, value):
		if key == 'default_realm':
			self.default_realm = value
		elif key == 'dns_lookup_kdc':
			self.dns_lookup_kdc = parse_bool(value)
		elif key in ('default_tkt_enctypes', 'permitted_enctypes'):
			ids = parse_enctypes(value)
			if not ids:
				raise ConfigurationError(f"No usable encryption type in {key}")
			self.default_tkt_enctype_ids = ids
		elif key == 'kdc_timeout':
			try:
				self.kdc_timeout = int(value.rstrip('s'))
			except ValueError:
				raise ConfigurationError(f"Invalid kdc_timeout: {value}")
		else:
			self.extra[key] = value

class RealmConfig:
	def __init__(self, realm):
		self.realm = realm
		self.kdc = []
		self.admin_server = []
		self.extra = {}

	def add(self, key, value):
		if key == 'kdc':
			self.kdc.append(value)
		elif key == 'admin_server':
			self.admin_server.append(value)
		else:
			self.extra.setdefault(key, []).append(value)

class Socks5Settings:
	def __init__(self, host, port, username=None, password=None):
		self.host = host
		self.port = port
		self.username = username or None
		self.password = password or None

	@property
	def address(self):
		return join_host_port(self.host, self.port)

	def __repr__(self):
		return f"Socks5Settings(address={self.address!r}, username={self.username!r})"

class Krb5Config:
	"""
	Subset of a krb5.conf: [libdefaults] and [realms].
	"""
	def __init__(self):
		self.lib_defaults = LibDefaults()
		self.realms = {}
		self.socks5 = None

	@classmethod
	def from_string(cls, text):
		config = cls()
		section = None
		realm = None

		for lineno, raw in enumerate(text.splitlines(), 1):
			line = raw.strip()
			if not line or line.startswith(('#', ';')):
				continue

			if line.startswith('['):
				if not line.endswith(']') or realm is not None:
					raise ConfigurationError(f"Malformed section header on line {lineno}: {line}")
				section = line[1:-1].strip()
				continue

			if section is None:
				raise ConfigurationError(f"Entry outside of any section on line {lineno}: {line}")

			if realm is not None:
				if line == '}':
					config.realms[realm.realm] = realm
					realm = None
					continue
				key, value = cls._split_entry(line, lineno)
				realm.add(key, value)
				continue

			key, value = cls._split_entry(line, lineno)
			if section == 'realms':
				if value != '{':
					raise ConfigurationError(f"Expected '{{' after realm {key} on line {lineno}")
				realm = RealmConfig(key)
			elif section == 'libdefaults':
				config.lib_defaults.set(key, value)
			else:
				LOG.debug(f"Ignoring [{section}] entry {key}")

		if realm is not None:
			raise ConfigurationError(f"Unterminated block for realm {realm.realm}")

		return config

	@staticmethod
	def _split_entry(line, lineno):
		key, sep, value = line.partition('=')
		key = key.strip()
		value = value.strip()
		if not sep or not key:
			raise ConfigurationError(f"Malformed entry on line {lineno}: {line}")
		return key, value

	def enable_socks5(self, proxy, username=None, password=None):
		host, port = split_host_port(proxy, default_port=None)
		if port is None:
			raise ConfigurationError(f"SOCKS5 proxy must be host:port, got {proxy}")
		self.socks5 = Socks5Settings(host, port, username, password)
		return self.socks5

	def get_kdcs(self, realm):
		"""
		Resolve the KDCs of a realm.

		Returns:
			dict: priority index (from 1) to "host:port"
		"""
		realm_config = self.realms.get(realm)
		if realm_config and realm_config.kdc:
			kdcs = [join_host_port(*split_host_port(kdc)) for kdc in realm_config.kdc]
		elif self.lib_defaults.dns_lookup_kdc:
			kdcs = get_kdc_srv_records(realm)
		else:
			raise ConfigurationError(f"No KDC defined for realm {realm} and DNS lookup is disabled")

		if not kdcs:
			raise ConfigurationError(f"No KDCs found for realm {realm}")
		return {index: kdc for index, kdc in enumerate(kdcs, 1)}
