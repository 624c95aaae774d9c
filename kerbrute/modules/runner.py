#!/usr/bin/env python3
import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, FIRST_COMPLETED, wait

from kerbrute.utils.errors import handle_kerb_error
from kerbrute.utils.helpers import strip_domain, parse_combo
from kerbrute.utils.logging import NOTICE, LOGGER_NAME

class ProbeRunner:
	"""
	Drives session probes from wordlists on a pool of worker threads.

	Args:
		session (KerbruteSession): shared, read-only probing session
		threads (int): number of workers
		delay (int): milliseconds to wait after each probe, forces a single worker
		stop_on_success (bool): cancel the run after the first valid login
	"""
	def __init__(self, session, threads=10, delay=0, stop_on_success=False, logger=None):
		self.session = session
		self.delay = delay
		self.threads = 1 if delay > 0 else max(1, threads)
		self.stop_on_success = stop_on_success
		self.logger = logger or logging.getLogger(LOGGER_NAME)
		self.cancelled = threading.Event()
		self._lock = threading.Lock()
		self.count = 0
		self.successes = 0

	def cancel(self):
		self.cancelled.set()

	def _record(self, success):
		with self._lock:
			self.count += 1
			if success:
				self.successes += 1

	def _guard(self, worker, *job):
		if self.cancelled.is_set():
			return
		worker(*job)
		if self.delay > 0:
			time.sleep(self.delay / 1000)

	def _run(self, jobs, worker, summary="Done! Tested {count} logins ({successes} successes) in {elapsed:.3f} seconds"):
		if self.delay > 0:
			self.logger.info(f"Delay set. Using single thread and delaying {self.delay}ms between attempts")

		start = time.time()
		with ThreadPoolExecutor(max_workers=self.threads) as pool:
			pending = set()
			for job in jobs:
				if self.cancelled.is_set():
					break
				pending.add(pool.submit(self._guard, worker, *job))
				if len(pending) >= self.threads * 2:
					done, pending = wait(pending, return_when=FIRST_COMPLETED)
					for future in done:
						future.result()
			for future in pending:
				future.result()

		elapsed = time.time() - start
		self.logger.info(summary.format(count=self.count, successes=self.successes, elapsed=elapsed))
		return self.successes

	def _handle_error(self, target, err):
		keep_going, message = handle_kerb_error(err, self.session.safe_mode)
		if not keep_going:
			self.logger.error(f"[!] {target} - {message}")
			self.cancel()
		else:
			self.logger.debug(f"[!] {target} - {message}")

	def test_username(self, username):
		usernamefull = f"{username}@{self.session.domain}"
		valid, err = self.session.test_username(username)
		self._record(valid)
		if valid:
			if err is not None:
				self.logger.log(NOTICE, f"[+] VALID USERNAME WITH ERROR:\t {username}\t ({err})")
			else:
				self.logger.log(NOTICE, f"[+] VALID USERNAME:\t {usernamefull}")
		elif err is not None:
			self._handle_error(usernamefull, err)
		else:
			self.logger.debug(f"[!] Unknown behavior - {usernamefull}")

	def test_login(self, username, password):
		login = f"{username}@{self.session.domain}"
		valid, err = self.session.test_login(username, password)
		self._record(valid)
		if valid:
			if err is not None:
				self.logger.log(NOTICE, f"[+] VALID LOGIN WITH ERROR:\t {login} : {password}\t ({err})")
			else:
				self.logger.log(NOTICE, f"[+] VALID LOGIN:\t {login} : {password}")
			if self.stop_on_success:
				self.logger.info("Stop on success enabled. Stopping")
				self.cancel()
		else:
			self._handle_error(login, err)

	def _usernames(self, lines):
		for line in lines:
			username = strip_domain(line.strip())
			if not username:
				continue
			yield username

	def userenum(self, usernames):
		jobs = ((username,) for username in self._usernames(usernames))
		return self._run(jobs, self.test_username, "Done! Tested {count} usernames ({successes} valid) in {elapsed:.3f} seconds")

	def passwordspray(self, usernames, password=None, user_as_pass=False):
		if user_as_pass:
			jobs = ((username, username) for username in self._usernames(usernames))
		else:
			jobs = ((username, password) for username in self._usernames(usernames))
		return self._run(jobs, self.test_login)

	def bruteuser(self, passwords, username):
		username = strip_domain(username)
		jobs = ((username, password) for password in passwords if password)
		return self._run(jobs, self.test_login)

	def bruteforce(self, combos):
		return self._run(self._combos(combos), self.test_login)

	def _combos(self, lines):
		for line in lines:
			if not line:
				continue
			combo = parse_combo(line)
			if combo is None:
				self.logger.debug("[!] Skipping malformed combo line")
				continue
			yield strip_domain(combo[0]), combo[1]
