#!/usr/bin/env python3
import unittest
import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from kerbrute.utils.errors import (
	handle_kerb_error,
	KerberosSemanticError,
	TransportError,
	ProtocolError,
	ASRepVerificationError,
	InvalidPrincipalError,
	ProbeOutcome,
)

class HandleKerbErrorTests(unittest.TestCase):
	def test_error_table(self):
		cases = [
			(TransportError("Networking_Error: down"), False, (False, "NETWORK ERROR - Can't talk to KDC. Aborting...")),
			(KerberosSemanticError(68), False, (False, "KDC ERROR - Wrong Realm. Try adjusting the domain? Aborting...")),
			(KerberosSemanticError(6), False, (True, "User does not exist")),
			(KerberosSemanticError(24), False, (True, "Invalid password")),
			(KerberosSemanticError(18), False, (True, "USER LOCKED OUT")),
			(KerberosSemanticError(18), True, (False, "USER LOCKED OUT and safe mode on! Aborting...")),
			(KerberosSemanticError(37), False, (True, "Clock skew is too great")),
			(ASRepVerificationError("bad"), False, (True, "Got AS-REP (no pre-auth) but couldn't decrypt - bad password")),
		]
		for err, safe_mode, expected in cases:
			with self.subTest(err=str(err), safe_mode=safe_mode):
				self.assertEqual(handle_kerb_error(err, safe_mode), expected)

	def test_unknown_error_aborts_with_text(self):
		err = ProtocolError("Could not unmarshal AS-REP")
		self.assertEqual(handle_kerb_error(err), (False, "Could not unmarshal AS-REP"))

	def test_unlisted_kdc_error_aborts(self):
		keep_going, message = handle_kerb_error(KerberosSemanticError(14))
		self.assertFalse(keep_going)
		self.assertIn("KDC_ERR_ETYPE_NOSUPP", message)

	def test_blank_username_keeps_going(self):
		keep_going, message = handle_kerb_error(InvalidPrincipalError("client does not have a username"))
		self.assertIn("Skipping invalid username", message)
		self.assertTrue(keep_going)

class KerberosSemanticErrorTests(unittest.TestCase):
	def test_message(self):
		err = KerberosSemanticError(25)
		self.assertEqual(err.error_name, "KDC_ERR_PREAUTH_REQUIRED")
		self.assertTrue(str(err).startswith("KRB Error: (25) KDC_ERR_PREAUTH_REQUIRED"))

	def test_unknown_code(self):
		err = KerberosSemanticError(999)
		self.assertIn("(999)", str(err))
		self.assertEqual(err.outcome, ProbeOutcome.ERROR)

	def test_outcomes(self):
		self.assertEqual(KerberosSemanticError(25).outcome, ProbeOutcome.NEEDS_PREAUTH)
		self.assertEqual(KerberosSemanticError(6).outcome, ProbeOutcome.INVALID_USER)
		self.assertEqual(KerberosSemanticError(24).outcome, ProbeOutcome.BAD_CREDENTIALS)
		self.assertEqual(KerberosSemanticError(18).outcome, ProbeOutcome.LOCKED_OUT)
		self.assertEqual(TransportError("x").outcome, ProbeOutcome.ERROR)
		self.assertEqual(ASRepVerificationError("x").outcome, ProbeOutcome.BAD_CREDENTIALS)

if __name__ == '__main__':
	unittest.main()
