# https://raw.githubusercontent.com/fortra/impacket/refs/heads/master/examples/GetNPUsers.py
import os
import threading
from binascii import hexlify

from impacket.krb5 import constants

class UnsupportedEncryptionType(ValueError):
	pass

def principal_name(asRep):
	return "/".join(str(component) for component in asRep['cname']['name-string'])

def asrep_to_hashcat(asRep):
	"""
	Format the enc-part of an AS-REP as a hashcat/john $krb5asrep$ string.

	Args:
		asRep (AS_REP): decoded AS-REP

	Returns:
		str: the hash
	"""
	etype = int(asRep['enc-part']['etype'])
	clientName = principal_name(asRep)
	domain = str(asRep['crealm'])
	cipher = asRep['enc-part']['cipher'].asOctets()

	# Check what type of encryption is used for the enc-part data
	# This will inform how the hash output needs to be formatted
	if etype in (constants.EncryptionTypes.aes128_cts_hmac_sha1_96.value, constants.EncryptionTypes.aes256_cts_hmac_sha1_96.value):
		return '$krb5asrep$%d$%s$%s$%s$%s' % (etype, clientName, domain,
												hexlify(cipher[-12:]).decode(),
												hexlify(cipher[:-12]).decode())
	elif etype == constants.EncryptionTypes.rc4_hmac.value:
		return '$krb5asrep$%d$%s@%s:%s$%s' % (etype, clientName, domain,
												hexlify(cipher[:16]).decode(),
												hexlify(cipher[16:]).decode())
	raise UnsupportedEncryptionType(f"no crackable hash format for encryption type {etype}")

class HashFile:
	"""
	Append-only hash sink shared by every probe of a session.
	"""
	def __init__(self, file_name):
		self.name = os.path.expanduser(file_name)
		self._lock = threading.Lock()
		self._fd = open(self.name, 'a')

	def write(self, hash):
		with self._lock:
			self._fd.write(f"{hash}\n")
			self._fd.flush()

	def close(self):
		with self._lock:
			if not self._fd.closed:
				self._fd.close()

	@property
	def closed(self):
		return self._fd.closed
