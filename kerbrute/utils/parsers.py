import argparse
import sys

from kerbrute.utils.colors import bcolors
from kerbrute.utils.helpers import validate_proxy
from kerbrute._version import BANNER, __version__

# https://stackoverflow.com/questions/14591168/argparse-dont-show-usage-on-h
class KerbruteParser(argparse.ArgumentParser):
	def error(self, message):
		print(message)
		sys.exit(1)

def add_session_arguments(parser):
	parser.add_argument('-d', '--domain', dest='domain', action='store', default='', help='The full domain to use (e.g. contoso.com)')
	parser.add_argument('--dc', dest='domain_controller', action='store', default='', help='The location of the Domain Controller (KDC) to target. If blank, will lookup via DNS')
	parser.add_argument('-o', '--output', dest='output', action='store', default=None, help='File to write logs to. Optional.')
	parser.add_argument('-v', '--verbose', dest='verbose', action='store_true', default=False, help='Log failures and errors')
	parser.add_argument('--safe', dest='safe', action='store_true', default=False, help='Safe mode. Will abort if any user comes back as locked out')
	parser.add_argument('-t', '--threads', dest='threads', action='store', type=int, default=10, help='Threads to use (Default: 10)')
	parser.add_argument('--delay', dest='delay', action='store', type=int, default=0, help='Delay in millisecond between each attempt. Will always use single thread if set')
	parser.add_argument('--downgrade', dest='downgrade', action='store_true', default=False, help='Force downgraded encryption type (arcfour-hmac-md5)')
	parser.add_argument('--hash-file', dest='hash_file', action='store', default=None, help='File to save AS-REP hashes to (if any captured), otherwise just logged')

	proxy = parser.add_argument_group('proxy')
	proxy.add_argument('--socks5', dest='socks5', action='store', default=None, type=validate_proxy, metavar='host:port', help='SOCKS5 proxy to route KDC traffic through')
	proxy.add_argument('--socks5-user', dest='socks5_user', action='store', default=None, help='SOCKS5 proxy username')
	proxy.add_argument('--socks5-pass', dest='socks5_pass', action='store', default=None, help='SOCKS5 proxy password')

def arg_parse(argv=None):
	parser = KerbruteParser(description=f"A tool to perform Kerberos pre-auth bruteforcing, version {bcolors.OKBLUE + __version__ + bcolors.ENDC}")
	parser.add_argument('--version', dest='version', action='version', version=BANNER)

	common = argparse.ArgumentParser(add_help=False)
	add_session_arguments(common)

	subparsers = parser.add_subparsers(dest='command', metavar='command')

	userenum = subparsers.add_parser('userenum', parents=[common], help='Enumerate valid domain usernames via Kerberos')
	userenum.add_argument('usernames', action='store', help='File of usernames ("-" for stdin)')

	spray = subparsers.add_parser('passwordspray', parents=[common], help='Test a single password against a list of users')
	spray.add_argument('usernames', action='store', help='File of usernames ("-" for stdin)')
	spray.add_argument('password', action='store', nargs='?', default=None, help='Password to spray')
	spray.add_argument('--user-as-pass', dest='user_as_pass', action='store_true', default=False, help='Spray every username as its own password')
	spray.add_argument('--stop-on-success', dest='stop_on_success', action='store_true', default=False, help='Stop on first valid login')

	bruteuser = subparsers.add_parser('bruteuser', parents=[common], help='Bruteforce a single user\'s password from a wordlist')
	bruteuser.add_argument('passwords', action='store', help='File of passwords ("-" for stdin)')
	bruteuser.add_argument('username', action='store', help='Username to bruteforce')
	bruteuser.add_argument('--stop-on-success', dest='stop_on_success', action='store_true', default=False, help='Stop on first valid login')

	bruteforce = subparsers.add_parser('bruteforce', parents=[common], help='Read username:password combos from a file or stdin and test them')
	bruteforce.add_argument('combos', action='store', help='File of username:password lines ("-" for stdin)')
	bruteforce.add_argument('--stop-on-success', dest='stop_on_success', action='store_true', default=False, help='Stop on first valid login')

	subparsers.add_parser('version', help='Display version info and quit')

	if argv is None and len(sys.argv) == 1:
		parser.print_help()
		sys.exit(1)

	args = parser.parse_args(argv)

	if args.command is None:
		parser.print_help()
		sys.exit(1)

	if args.command == 'passwordspray' and not args.user_as_pass and args.password is None:
		parser.error("passwordspray requires a password unless --user-as-pass is set")

	if args.command != 'version' and not args.domain:
		parser.error("Domain (-d, --domain) must be specified")

	return args
