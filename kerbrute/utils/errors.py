import enum

from impacket.krb5 import constants

class ProbeOutcome(enum.Enum):
	SUCCESS = "success"
	NEEDS_PREAUTH = "needs-preauth"
	INVALID_USER = "invalid-user"
	BAD_CREDENTIALS = "bad-credentials"
	LOCKED_OUT = "locked-out"
	ERROR = "error"

class KerbruteError(Exception):
	outcome = ProbeOutcome.ERROR

class ConfigurationError(KerbruteError):
	"""Session cannot be built: empty domain, bad template or config, no KDC."""
	pass

class TransportError(KerbruteError):
	"""No KDC could be reached."""
	pass

class ProtocolError(KerbruteError):
	"""KDC answered with bytes that are not a usable Kerberos message."""
	pass

class InvalidPrincipalError(KerbruteError):
	pass

class ASRepVerificationError(KerbruteError):
	"""AS-REP enc-part could not be decrypted with the password derived key."""
	outcome = ProbeOutcome.BAD_CREDENTIALS

_CODE_OUTCOMES = {
	constants.ErrorCodes.KDC_ERR_PREAUTH_REQUIRED.value: ProbeOutcome.NEEDS_PREAUTH,
	constants.ErrorCodes.KDC_ERR_C_PRINCIPAL_UNKNOWN.value: ProbeOutcome.INVALID_USER,
	constants.ErrorCodes.KDC_ERR_PREAUTH_FAILED.value: ProbeOutcome.BAD_CREDENTIALS,
	constants.ErrorCodes.KDC_ERR_CLIENT_REVOKED.value: ProbeOutcome.LOCKED_OUT,
}

class KerberosSemanticError(KerbruteError):
	"""
	Well formed KRB-ERROR returned by the KDC.

	Args:
		error_code (int): Kerberos error-code field
		e_data (bytes): raw e-data field, if any
		packet: decoded KRB_ERROR, if any
	"""
	def __init__(self, error_code, e_data=None, packet=None):
		self.error_code = int(error_code)
		self.e_data = e_data
		self.packet = packet
		self.error_name, self.description = constants.ERROR_MESSAGES.get(
			self.error_code,
			("KRB_ERR_UNKNOWN_%d" % self.error_code, "Unknown Kerberos error")
		)
		super().__init__("KRB Error: (%d) %s %s" % (self.error_code, self.error_name, self.description))

	@classmethod
	def from_packet(cls, packet):
		e_data = None
		if packet['e-data'].hasValue():
			e_data = packet['e-data'].asOctets()
		return cls(packet['error-code'], e_data=e_data, packet=packet)

	@property
	def outcome(self):
		return _CODE_OUTCOMES.get(self.error_code, ProbeOutcome.ERROR)

def handle_kerb_error(err, safe_mode=False):
	"""
	Decide whether a run should keep going after a failed probe.

	Args:
		err (Exception): error returned by a probe
		safe_mode (bool): abort on the first locked out account

	Returns:
		tuple: (keep_going, message)
	"""
	if isinstance(err, TransportError):
		return False, "NETWORK ERROR - Can't talk to KDC. Aborting..."
	if isinstance(err, ASRepVerificationError):
		return True, "Got AS-REP (no pre-auth) but couldn't decrypt - bad password"
	if isinstance(err, InvalidPrincipalError):
		return True, f"Skipping invalid username ({err})"
	if isinstance(err, KerberosSemanticError):
		code = err.error_code
		if code == constants.ErrorCodes.KDC_ERR_WRONG_REALM.value:
			return False, "KDC ERROR - Wrong Realm. Try adjusting the domain? Aborting..."
		if code == constants.ErrorCodes.KDC_ERR_C_PRINCIPAL_UNKNOWN.value:
			return True, "User does not exist"
		if code == constants.ErrorCodes.KDC_ERR_PREAUTH_FAILED.value:
			return True, "Invalid password"
		if code == constants.ErrorCodes.KDC_ERR_CLIENT_REVOKED.value:
			if safe_mode:
				return False, "USER LOCKED OUT and safe mode on! Aborting..."
			return True, "USER LOCKED OUT"
		if code == constants.ErrorCodes.KRB_AP_ERR_SKEW.value:
			return True, "Clock skew is too great"
	return False, str(err)
