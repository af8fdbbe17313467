# Copyright 2012 Matt Chaput. All rights reserved.
#
# Redistribution and use in source and binary forms, with or without
# modification, are permitted provided that the following conditions are met:
#
#    1. Redistributions of source code must retain the above copyright notice,
#       this list of conditions and the following disclaimer.
#
#    2. Redistributions in binary form must reproduce the above copyright
#       notice, this list of conditions and the following disclaimer in the
#       documentation and/or other materials provided with the distribution.
#
# THIS SOFTWARE IS PROVIDED BY MATT CHAPUT ``AS IS'' AND ANY EXPRESS OR
# IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE IMPLIED WARRANTIES OF
# MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE DISCLAIMED. IN NO
# EVENT SHALL MATT CHAPUT OR CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT,
# INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT
# LIMITED TO, PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA,
# OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF
# LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING
# NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE,
# EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.
#
# The views and conclusions contained in the software and documentation are
# those of the authors and should not be interpreted as representing official
# policies, either expressed or implied, of Matt Chaput.

"""
Command line driver.

Usage::

    fsakit --union a.txt b.txt --minimization c.txt

Every operation flag takes one or two automaton files and the operations run
in the order given. After each one the driver asks on stderr for a file to
save the result to; an empty answer prints it on stdout.
"""

import argparse
import sys

from loguru import logger

from fsakit import versionstring
from fsakit.automata import (
    AutomatonError,
    concatenation,
    determinize,
    intersection,
    minimize,
    union,
)
from fsakit.codec import FileFormatError, read_file, write, write_file
from fsakit.util import now

# Flag name -> (number of input files, operation)
OPERATIONS = {
    "union": (2, union),
    "intersection": (2, intersection),
    "concatenation": (2, concatenation),
    "determinization": (1, determinize),
    "minimization": (1, minimize),
}

PROMPT = "Enter the name of the file to save the result to, or press enter to print it: "


class OperationAction(argparse.Action):
    """
    Appends ``(operation name, paths)`` to the namespace, so repeated and
    mixed operation flags keep their command line order.
    """

    def __call__(self, parser, namespace, values, option_string=None):
        operations = list(getattr(namespace, self.dest) or [])
        operations.append((self.const, list(values)))
        setattr(namespace, self.dest, operations)


def _positive_int(value):
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError("must be a positive integer")
    return number


def make_parser():
    parser = argparse.ArgumentParser(
        prog="fsakit",
        description="Union, intersection, concatenation, determinization and "
        "minimization of finite state automata.",
        allow_abbrev=False,
    )
    group = parser.add_argument_group("operations")
    for name, (arity, _) in OPERATIONS.items():
        group.add_argument(
            "--" + name,
            nargs=arity,
            action=OperationAction,
            const=name,
            dest="operations",
            metavar=("A", "B")[:arity] if arity > 1 else "A",
            help="%s of %s" % (name, "two automata" if arity > 1 else "an automaton"),
        )
    parser.add_argument(
        "--max-states",
        type=_positive_int,
        default=None,
        metavar="N",
        help="fail instead of building a DFA with more than N states",
    )
    parser.add_argument(
        "--no-prompt",
        action="store_true",
        help="print every result on stdout without asking for a file",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="log progress (-v) or debugging details (-vv) on stderr",
    )
    parser.add_argument(
        "--version", action="version", version="%(prog)s " + versionstring()
    )
    parser.set_defaults(operations=[])
    return parser


def configure_logging(verbosity):
    level = ("WARNING", "INFO", "DEBUG")[min(verbosity, 2)]
    logger.remove()
    logger.add(sys.stderr, level=level, format="<level>{level: <8}</level> {message}")
    logger.enable("fsakit")


def perform(name, paths, max_states=None):
    """
    Reads the automata at ``paths`` and applies the named operation to them.

    Raises:
        OSError: if a file cannot be read.
        FileFormatError: if a file is malformed.
        AutomatonError: if the operation fails, for example on exceeding
            ``max_states``.
    """
    _, operation = OPERATIONS[name]
    automata = [read_file(path) for path in paths]
    t = now()
    result = operation(*automata, max_states=max_states)
    logger.info(
        "{} of {} gave {} in {:0.4f} s", name, " and ".join(paths), result, now() - t
    )
    return result


def ask_destination(stdin=None, stderr=None):
    """
    Asks for the file to save a result to. Returns an empty string (meaning
    stdout) for an empty answer or at the end of input.
    """
    stdin = stdin or sys.stdin
    stderr = stderr or sys.stderr
    stderr.write(PROMPT)
    stderr.flush()
    return stdin.readline().strip()


def save(fsa, destination, stdout=None):
    if destination:
        write_file(fsa, destination)
    else:
        write(fsa, stdout or sys.stdout)


def main(argv=None):
    """
    Runs the command line driver and returns the process exit status: 0 on
    success, 1 when reading a file or running an operation fails. Usage
    errors exit through argparse with status 2 before any operation runs.
    """
    parser = make_parser()
    args = parser.parse_args(argv)
    if not args.operations:
        parser.error("at least one operation is required")
    configure_logging(args.verbose)

    try:
        for name, paths in args.operations:
            result = perform(name, paths, max_states=args.max_states)
            destination = "" if args.no_prompt else ask_destination()
            save(result, destination)
    except (FileFormatError, AutomatonError, OSError) as e:
        logger.error("{}", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
