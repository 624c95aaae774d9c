import datetime

__year__ = datetime.date.today().year
__version__ = "1.1.0"
__author__ = [
	"ropnop",
	"mr-pmillz"
]

BANNER = "Kerbrute v{} ({}) - by {}\n".format(__version__, __year__, ", ".join(__author__))
