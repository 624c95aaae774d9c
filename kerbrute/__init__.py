#!/usr/bin/env python3
from kerbrute.session import KerbruteSession
from kerbrute.modules.runner import ProbeRunner
from kerbrute.utils.colors import Gradient
from kerbrute.utils.errors import ConfigurationError
from kerbrute.utils.helpers import read_lines, is_valid_fqdn, is_ipaddress
from kerbrute.utils.logging import setup_logger
from kerbrute.utils.parsers import arg_parse
from kerbrute._version import BANNER

ASCII_BANNER = r"""
    __             __               __
   / /_____  _____/ /_  _______  __/ /____
  / //_/ _ \/ ___/ __ \/ ___/ / / / __/ _ \
 / ,< /  __/ /  / /_/ / /  / /_/ / /_/  __/
/_/|_|\___/_/  /_.___/_/   \__,_/\__/\___/
"""

def main(argv=None):
	"""
	Entry point: parse arguments, build the session for the target realm and
	run the requested subcommand.
	"""
	args = arg_parse(argv)

	if args.command == 'version':
		print(BANNER)
		return 0

	print(Gradient.fire(ASCII_BANNER))
	print(BANNER)

	logger = setup_logger(args.verbose, args.output)

	if not is_valid_fqdn(args.domain) and not is_ipaddress(args.domain):
		logger.warning(f"{args.domain} does not look like a fully qualified domain name")

	try:
		session = KerbruteSession(
			args.domain,
			domain_controller=args.domain_controller,
			verbose=args.verbose,
			safe_mode=args.safe,
			downgrade=args.downgrade,
			hash_filename=args.hash_file,
			socks5_proxy=args.socks5,
			socks5_username=args.socks5_user,
			socks5_password=args.socks5_pass,
			logger=logger,
		)
	except ConfigurationError as e:
		logger.error(str(e))
		return 1

	with session:
		logger.info("Using KDC(s):")
		for index in sorted(session.kdcs):
			logger.info(f"\t{session.kdcs[index]}")

		runner = ProbeRunner(
			session,
			threads=args.threads,
			delay=args.delay,
			stop_on_success=getattr(args, 'stop_on_success', False),
			logger=logger,
		)
		try:
			if args.command == 'userenum':
				runner.userenum(read_lines(args.usernames))
			elif args.command == 'passwordspray':
				runner.passwordspray(read_lines(args.usernames), args.password, args.user_as_pass)
			elif args.command == 'bruteuser':
				runner.bruteuser(read_lines(args.passwords), args.username)
			elif args.command == 'bruteforce':
				runner.bruteforce(read_lines(args.combos))
		except OSError as e:
			logger.error(str(e))
			return 1
		except KeyboardInterrupt:
			runner.cancel()
			logger.warning("Interrupted, waiting for running probes to finish")
			return 130

	return 0
