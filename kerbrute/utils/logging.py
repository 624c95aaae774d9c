#!/usr/bin/env python3
import os
import logging

NOTICE = 25
logging.addLevelName(NOTICE, 'NOTICE')

LOGGER_NAME = 'kerbrute'

class CustomFormatter(logging.Formatter):
	grey = '\033[2;37m'
	green = '\033[92m'
	bold_green = '\033[1;92m'
	yellow = '\033[93m'
	red = '\033[91m'
	bold_red = '\x1b[31;1m'
	reset = '\033[0m'

	def __init__(self, fmt):
		super().__init__()
		self.fmt = fmt
		self.FORMATS = {
			logging.DEBUG: self.grey + self.fmt + self.reset,
			logging.INFO: self.green + self.fmt + self.reset,
			NOTICE: self.bold_green + self.fmt + self.reset,
			logging.WARNING: self.yellow + self.fmt + self.reset,
			logging.ERROR: self.red + self.fmt + self.reset,
			logging.CRITICAL: self.bold_red + self.fmt + self.reset
		}

	def format(self, record):
		log_fmt = self.FORMATS.get(record.levelno, self.fmt)
		formatter = logging.Formatter(log_fmt, "%Y/%m/%d %H:%M:%S")
		return formatter.format(record)

def setup_logger(verbose=False, log_file=None, name=LOGGER_NAME):
	"""
	Configure the console (and optional file) handlers of the kerbrute logger.

	Args:
		verbose (bool): show debug messages on the console
		log_file (str): also append every message to this file
		name (str): logger name

	Returns:
		logging.Logger
	"""
	level = logging.DEBUG if verbose else logging.INFO

	logger = logging.getLogger(name)
	logger.setLevel(logging.DEBUG)
	logger.propagate = False
	for handler in list(logger.handlers):
		logger.removeHandler(handler)
		handler.close()

	stdout_handler = logging.StreamHandler()
	stdout_handler.setLevel(level)
	stdout_handler.setFormatter(CustomFormatter('%(asctime)s >  %(message)s'))
	logger.addHandler(stdout_handler)

	if log_file:
		fileh = logging.FileHandler(os.path.expanduser(log_file), 'a')
		fileh.setLevel(level)
		fileh.setFormatter(logging.Formatter('[%(asctime)s] %(levelname)s %(message)s', "%Y/%m/%d %H:%M:%S"))
		logger.addHandler(fileh)

	return logger
