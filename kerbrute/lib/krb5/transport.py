import logging
import socket
import struct

import socks
from pyasn1.codec.der import decoder
from pyasn1.error import PyAsn1Error
from impacket.krb5.asn1 import KRB_ERROR

from kerbrute.lib.krb5.config import split_host_port, DEFAULT_KDC_TIMEOUT
from kerbrute.utils.errors import TransportError, ProtocolError, KerberosSemanticError

LOG = logging.getLogger('kerbrute.transport')

def open_connection(host, port, socks5=None, timeout=DEFAULT_KDC_TIMEOUT):
	if socks5 is None:
		return socket.create_connection((host, port), timeout=timeout)

	s = socks.socksocket()
	s.set_proxy(socks.SOCKS5, socks5.host, socks5.port, rdns=True, username=socks5.username, password=socks5.password)
	s.settimeout(timeout)
	try:
		s.connect((host, port))
	except (OSError, socks.ProxyError):
		s.close()
		raise
	return s

def recv_exact(s, length):
	data = b''
	while len(data) < length:
		chunk = s.recv(length - len(data))
		if not chunk:
			raise ConnectionError("connection closed by KDC after %d of %d bytes" % (len(data), length))
		data += chunk
	return data

def send_tcp(data, host, port, socks5=None, timeout=DEFAULT_KDC_TIMEOUT):
	"""
	One Kerberos exchange over TCP: 4 byte big endian length, then the message.
	"""
	with open_connection(host, port, socks5, timeout) as s:
		s.sendall(struct.pack('!i', len(data)) + data)
		recvDataLen = struct.unpack('!i', recv_exact(s, 4))[0]
		if recvDataLen <= 0:
			raise ProtocolError("KDC sent an invalid message length (%d)" % recvDataLen)
		return recv_exact(s, recvDataLen)

def check_krb_error(response):
	"""
	Raise KerberosSemanticError when the response is a KRB-ERROR, otherwise
	hand the raw bytes back.
	"""
	try:
		packet = decoder.decode(response, asn1Spec=KRB_ERROR())[0]
	except PyAsn1Error:
		return response
	raise KerberosSemanticError.from_packet(packet)

def send_to_kdc(data, kdcs, socks5=None, timeout=DEFAULT_KDC_TIMEOUT):
	"""
	Send a marshaled request to the KDCs of a realm, in priority order, until
	one of them answers.

	Args:
		data (bytes): DER encoded request
		kdcs (dict): priority index to "host:port"
		socks5 (Socks5Settings): route the connection through this proxy
		timeout (int): connect and read timeout in seconds

	Returns:
		bytes: raw response that is not a KRB-ERROR
	"""
	if not kdcs:
		raise TransportError("Networking_Error: no KDC to send the request to")

	failures = []
	for index in sorted(kdcs):
		address = kdcs[index]
		host, port = split_host_port(address)
		try:
			response = send_tcp(data, host, port, socks5, timeout)
		except (OSError, socks.ProxyError) as e:
			LOG.debug(f"Could not talk to KDC {address}: {e}")
			failures.append(f"{address}: {e}")
			continue
		return check_krb_error(response)

	raise TransportError("Networking_Error: AS Exchange Error: failed sending AS_REQ to KDC: %s" % "; ".join(failures))
