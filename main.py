"""
usage: main.py --input /tmp/file -p /var/log --path ./log -v -- -path/log apache.log
"""
import sys

from rich.pretty import pprint

from flagstone import *

verbose = Holder(TypeKind.BOOL)
infile = Holder(TypeKind.STRING)
paths = Holder(TypeKind.STRINGS)

spec = [
    Option(long="input", holder=infile),
    Option("v", holder=verbose),
    Option("p", "path", paths),
]


if __name__ == '__main__':
    expanded, arguments = parse(sys.argv[1:], spec, shell=True, colorful=True)
    pprint({
        "expanded": expanded,
        "options": {
            "verbose": verbose.value,
            "input": infile.value,
            "paths": paths.value or [],
        },
        "arguments": arguments,
    })
