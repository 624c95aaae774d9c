from os import system

class bcolors:
	OKBLUE = '\033[94m'
	ENDC = '\033[0m'

class Gradient:
	"""
	Text gradient effects for terminal output.
	"""

	@staticmethod
	def fire(text):
		"""Red to yellow gradient."""
		system(""); faded = ""
		green = 250
		for line in text.splitlines():
			faded += (f"\033[38;2;255;{green};0m{line}\033[0m\n")
			if not green == 0:
				green -= 25
				if green < 0:
					green = 0
		return faded
