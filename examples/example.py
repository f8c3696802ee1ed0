"""
A sample application to showcase microflag.

    python examples/example.py -o result.txt -c Z -n 7 -d 2.5
"""

import sys
from dataclasses import dataclass
from typing import Annotated, Sequence

from microflag import Arg, Char, DataclassFlags, parse, print_help


@dataclass
class Args:
    show_help: Annotated[bool, Arg("-h", "--help", "show help message")] = False
    out_name: Annotated[str, Arg("-o", "--output", "set output file")] = "out"
    a_char: Annotated[Char, Arg("-c", "--char", "give me a char!")] = Char("A")
    a_number: Annotated[int, Arg("-n", "--number", "print this number")] = 0
    a_double: Annotated[float, Arg("-d", "--double", "print a double")] = 123.123


def main(argv: Sequence[str] | None = None) -> int:
    args = Args()
    flags = DataclassFlags(args)
    if not parse(flags, sys.argv if argv is None else argv).ok:
        return 1

    if args.show_help:
        print_help("example", "A sample application to showcase the library", flags)
        return 0

    print(f"Output file: {args.out_name}")
    print(f"A char:      {args.a_char}")
    print(f"A number:    {args.a_number}")
    print(f"A double:    {args.a_double:f}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
