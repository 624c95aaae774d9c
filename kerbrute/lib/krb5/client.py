#!/usr/bin/env python3
# AS exchange built from impacket primitives, following
# https://raw.githubusercontent.com/fortra/impacket/refs/heads/master/impacket/krb5/kerberosv5.py
import datetime
import logging
import random

from pyasn1.codec.der import decoder, encoder
from pyasn1.error import PyAsn1Error
from pyasn1.type.univ import noValue

from impacket.krb5 import constants
from impacket.krb5.asn1 import AS_REQ, AS_REP, KERB_PA_PAC_REQUEST, PA_ENC_TS_ENC, EncryptedData, METHOD_DATA, ETYPE_INFO2, seq_set, seq_set_iter
from impacket.krb5.crypto import _enctype_table, InvalidChecksum
from impacket.krb5.types import KerberosTime, Principal, KerberosException

from kerbrute.lib.krb5.transport import send_to_kdc
from kerbrute.utils.errors import (
	ProtocolError,
	InvalidPrincipalError,
	ASRepVerificationError,
	KerberosSemanticError,
)

PA_REQ_ENC_PA_REP = 149

PREAUTH_ERRORS = (
	constants.ErrorCodes.KDC_ERR_PREAUTH_REQUIRED.value,
	constants.ErrorCodes.KDC_ERR_PREAUTH_FAILED.value,
)

def decode_as_rep(data):
	try:
		return decoder.decode(data, asn1Spec=AS_REP())[0]
	except PyAsn1Error as e:
		raise ProtocolError(f"Could not unmarshal AS-REP: {e}")

def parse_etype_info2(padata_entries):
	"""
	Pull (etype, salt) pairs out of PA-ETYPE-INFO2 entries.
	"""
	entries = []
	for padata in padata_entries:
		if int(padata['padata-type']) != constants.PreAuthenticationDataTypes.PA_ETYPE_INFO2.value:
			continue
		try:
			etypes2 = decoder.decode(padata['padata-value'], asn1Spec=ETYPE_INFO2())[0]
		except PyAsn1Error as e:
			logging.getLogger('kerbrute.client').debug(f"Bad PA-ETYPE-INFO2: {e}")
			continue
		for etype2 in etypes2:
			if etype2['salt'] is None or etype2['salt'].hasValue() is False:
				salt = ''
			else:
				salt = str(etype2['salt'])
			entries.append((int(etype2['etype']), salt))
	return entries

def etype_info2_from_error(error):
	if not error.e_data:
		return []
	try:
		methods = decoder.decode(error.e_data, asn1Spec=METHOD_DATA())[0]
	except PyAsn1Error:
		return []
	return parse_etype_info2(methods)

class KerberosClient:
	"""
	Password based client for a single AS exchange.

	Args:
		username (str): client principal name
		realm (str): uppercase realm
		password (str): password used to derive the long term keys
		config (Krb5Config): parsed configuration (etypes, timeout, proxy)
		kdcs (dict): priority index to "host:port"
		disable_pafx_fast (bool): do not advertise FAST support to the KDC
		assume_preauth (bool): send PA-ENC-TIMESTAMP with the first request
	"""
	def __init__(self, username, realm, password, config, kdcs, disable_pafx_fast=False, assume_preauth=False, logger=None):
		self.username = username
		self.realm = realm
		self.password = password
		self.config = config
		self.kdcs = kdcs
		self.disable_pafx_fast = disable_pafx_fast
		self.assume_preauth = assume_preauth
		self.logger = logger or logging.getLogger('kerbrute.client')
		self._keys = {}

	def __enter__(self):
		return self

	def __exit__(self, exc_type, exc_value, traceback):
		self.destroy()
		return False

	def destroy(self):
		self._keys.clear()
		self.password = None

	def is_configured(self):
		if not self.username:
			raise InvalidPrincipalError("client does not have a username")
		if not self.realm:
			raise InvalidPrincipalError("client does not have a define realm")
		if self.password is None:
			raise InvalidPrincipalError("client has no password to derive keys from")
		# raises InvalidPrincipalError for names impacket cannot parse
		self.principal
		return True

	@property
	def principal(self):
		try:
			return Principal(self.username, type=constants.PrincipalNameType.NT_PRINCIPAL.value)
		except KerberosException as e:
			raise InvalidPrincipalError(f"invalid username {self.username!r}: {e}")

	@property
	def default_salt(self):
		return self.realm + "".join(self.principal.components)

	def etypes(self):
		etypes = [e for e in self.config.lib_defaults.default_tkt_enctype_ids if e in _enctype_table]
		if not etypes:
			raise ProtocolError("None of the configured encryption types is supported")
		return etypes

	def build_as_req(self, preauth=None):
		"""
		AS-REQ for a krbtgt of the client realm.

		Args:
			preauth (tuple): (etype, salt) to add a PA-ENC-TIMESTAMP, None for no pre-authentication

		Returns:
			AS_REQ
		"""
		if self.realm == '':
			raise InvalidPrincipalError('Empty Domain not allowed in Kerberos')

		clientName = self.principal
		serverName = Principal('krbtgt/%s' % self.realm, type=constants.PrincipalNameType.NT_SRV_INST.value)

		pacRequest = KERB_PA_PAC_REQUEST()
		pacRequest['include-pac'] = True
		padata = []
		if preauth is not None:
			padata.append((constants.PreAuthenticationDataTypes.PA_ENC_TIMESTAMP.value, self.encrypted_timestamp(*preauth)))
		padata.append((constants.PreAuthenticationDataTypes.PA_PAC_REQUEST.value, encoder.encode(pacRequest)))
		if not self.disable_pafx_fast:
			padata.append((PA_REQ_ENC_PA_REP, b''))

		asReq = AS_REQ()
		asReq['pvno'] = 5
		asReq['msg-type'] = int(constants.ApplicationTagNumbers.AS_REQ.value)

		asReq['padata'] = noValue
		for i, (padataType, padataValue) in enumerate(padata):
			asReq['padata'][i] = noValue
			asReq['padata'][i]['padata-type'] = int(padataType)
			asReq['padata'][i]['padata-value'] = padataValue

		reqBody = seq_set(asReq, 'req-body')

		opts = list()
		opts.append(constants.KDCOptions.forwardable.value)
		opts.append(constants.KDCOptions.renewable.value)
		opts.append(constants.KDCOptions.proxiable.value)
		reqBody['kdc-options'] = constants.encodeFlags(opts)

		seq_set(reqBody, 'sname', serverName.components_to_asn1)
		seq_set(reqBody, 'cname', clientName.components_to_asn1)

		reqBody['realm'] = self.realm

		now = datetime.datetime.now(datetime.timezone.utc) + datetime.timedelta(days=1)
		reqBody['till'] = KerberosTime.to_asn1(now)
		reqBody['rtime'] = KerberosTime.to_asn1(now)
		reqBody['nonce'] = random.getrandbits(31)

		seq_set_iter(reqBody, 'etype', tuple(int(e) for e in self.etypes()))

		return asReq

	def get_key(self, etype, salt):
		if (etype, salt) not in self._keys:
			self._keys[(etype, salt)] = _enctype_table[etype].string_to_key(self.password, salt, None)
		return self._keys[(etype, salt)]

	def encrypted_timestamp(self, etype, salt):
		cipher = _enctype_table[etype]
		key = self.get_key(etype, salt)

		timeStamp = PA_ENC_TS_ENC()
		now = datetime.datetime.now(datetime.timezone.utc)
		timeStamp['patimestamp'] = KerberosTime.to_asn1(now)
		timeStamp['pausec'] = now.microsecond

		# Key Usage 1
		encryptedTimeStamp = cipher.encrypt(key, 1, encoder.encode(timeStamp), None)

		encryptedData = EncryptedData()
		encryptedData['etype'] = cipher.enctype
		encryptedData['cipher'] = encryptedTimeStamp
		return encoder.encode(encryptedData)

	def send_to_kdc(self, data):
		return send_to_kdc(data, self.kdcs, self.config.socks5, self.config.lib_defaults.kdc_timeout)

	def exchange(self, preauth=None):
		return self.send_to_kdc(encoder.encode(self.build_as_req(preauth)))

	def select_etype_info(self, entries):
		etypes = self.etypes()
		for etype in etypes:
			for entry_etype, salt in entries:
				if entry_etype == etype:
					return etype, salt
		return None

	def login(self):
		"""
		Full AS exchange. Returns the verified AS_REP.

		The first request carries pre-authentication only when assume_preauth is
		set. A pre-auth error from the KDC is retried once with the etype and salt
		it advertises, unless those are the ones that were just used.
		"""
		self.is_configured()

		preauth = None
		if self.assume_preauth:
			preauth = (self.etypes()[0], self.default_salt)

		try:
			response = self.exchange(preauth)
		except KerberosSemanticError as e:
			if e.error_code not in PREAUTH_ERRORS:
				raise
			advertised = self.select_etype_info(etype_info2_from_error(e))
			if advertised is None:
				if preauth is not None:
					raise
				advertised = (self.etypes()[0], self.default_salt)
			if advertised == preauth:
				raise
			self.logger.debug(f"Retrying pre-authentication for {self.username} with etype {advertised[0]}")
			preauth = advertised
			response = self.exchange(preauth)

		asRep = decode_as_rep(response)
		self.verify(asRep, preauth)
		return asRep

	def verify(self, asRep, preauth=None):
		etype = int(asRep['enc-part']['etype'])
		if etype not in _enctype_table:
			raise ProtocolError(f"AS-REP uses unsupported encryption type {etype}")

		salt = None
		if asRep['padata'].hasValue():
			for entry_etype, entry_salt in parse_etype_info2(asRep['padata']):
				if entry_etype == etype:
					salt = entry_salt
					break
		if salt is None:
			salt = preauth[1] if preauth is not None and preauth[0] == etype else self.default_salt

		key = self.get_key(etype, salt)
		try:
			# Key Usage 3
			_enctype_table[etype].decrypt(key, 3, asRep['enc-part']['cipher'].asOctets())
		except InvalidChecksum:
			raise ASRepVerificationError("AS_REP is not valid or client password/keytab incorrect")
		except ValueError as e:
			raise ProtocolError(f"Could not decrypt AS-REP: {e}")
		return True
