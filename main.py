import ctypes

from rich.pretty import pprint

from sextant import *

__prog__ = "sextant-demo"

factor = Single("-f", type=int, metavar="N", default=42, help="Integer factor")
triple = Single("-t", "--triple", type=tuple[int, int, int], metavar=("A", "B", "C"), help="Make a tuple with 3 elements")
level = Single("-l", "--level", type=ctypes.c_uint8, metavar="LEVEL", help="Compression level")
include = Multiple("-I", "--include", metavar="DIR", help="Add a search directory")
verbose = Flag("-v", "--verbose", help="Talk more")

app = Application(shell=True, fancy=True).add(factor, triple, verbose)
app.group(Group("Search", include, level))


if __name__ == '__main__':
    app.write_usage()
    app.parse()
    pprint(app.options)
    pprint(app.unparsed)
