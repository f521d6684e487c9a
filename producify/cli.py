"""
producify command line

Usage:
    producify PATH --build FOLDER [FLAGS]
    producify PATH --serve [--port PORT] [FLAGS]

Examples:
    producify . --serve                         Serve current dir at a random port
    producify . --serve -CP                     ... without minifying or concatenating CSS
    producify public_html/ --build www/ --serve +JP
                                                Build to www concatenating CSS and JS, serve it
    producify public_html/ --build www/         Build public_html to the www folder
"""

import argparse
import re
import sys
from pathlib import Path

from .builder import SiteBuilder
from .errors import OptionError
from .log import Colors, error, log
from .options import DEFAULT_CSS_BUNDLE, DEFAULT_JS_BUNDLE, BuildOptions, BuildRequest, ExitState
from .server import ScopedBuildDir, serve

# Flag letter -> BuildOptions field
FLAGS = {
    'H': 'minify_html',
    'U': 'minify_js',
    'C': 'minify_css',
    'J': 'concat_js',
    'P': 'concat_css',
    'I': 'parse_includes',
}

FLAG_RE = re.compile(r'^([+-])([%s]+)$' % ''.join(FLAGS))

FLAGS_HELP = """\
flags (prepend + or - to enable or disable them):
  H  Minify HTML (default: enabled)
  U  Minify Javascript (default: enabled)
  C  Minify CSS (default: enabled)
  J  Concatenate Javascript files (default: disabled)
  P  Concatenate CSS files (default: disabled)
  I  Parse <include href="" /> tags (default: enabled)
"""


class ArgumentParser(argparse.ArgumentParser):
    """Usage errors exit with status 1 like every other failure"""

    def error(self, message):
        self.print_usage(sys.stderr)
        error(message)
        sys.exit(1)


def split_flags(argv):
    """Separate ``+JP`` / ``-C`` style toggles from the other arguments.

    Returns the remaining arguments and a dict of option name -> bool, later
    tokens winning over earlier ones.
    """
    rest = []
    toggles = {}
    for arg in argv:
        m = FLAG_RE.match(arg)
        if not m:
            rest.append(arg)
            continue
        enabled = m.group(1) == '+'
        for letter in m.group(2):
            toggles[FLAGS[letter]] = enabled
    return rest, toggles


def create_parser():
    parser = ArgumentParser(
        prog='producify',
        description='Build a static site: includes, CSS/JS minification and bundling, HTML minification',
        epilog=FLAGS_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        allow_abbrev=False,
    )
    parser.add_argument('path', nargs='?', help='Source folder')
    parser.add_argument('--build', metavar='FOLDER', nargs='?', const='',
                        help='Build PATH onto FOLDER')
    parser.add_argument('--serve', '--server', dest='serve', action='store_true',
                        help='Serve PATH as a webserver and rebuild on changes')
    parser.add_argument('--port', type=int, default=0,
                        help='HTTP server port (default: random free port)')
    parser.add_argument('--concatjsfilename', metavar='FILENAME', default=DEFAULT_JS_BUNDLE,
                        help=f'Bundle JS filename (default: {DEFAULT_JS_BUNDLE})')
    parser.add_argument('--concatcssfilename', metavar='FILENAME', default=DEFAULT_CSS_BUNDLE,
                        help=f'Bundle CSS filename (default: {DEFAULT_CSS_BUNDLE})')
    parser.add_argument('--y', dest='yes', action='store_true',
                        help='Answer "y" to every question, such as overwriting files')
    return parser


def build_options(args, toggles, overwrite=False):
    return BuildOptions(
        overwrite=overwrite,
        css_bundle_filename=args.concatcssfilename,
        js_bundle_filename=args.concatjsfilename,
        **toggles,
    )


def confirm_overwrite(target):
    try:
        answer = input(f"The folder {target} is not empty. Do you want to DELETE every file on it? [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in ('y', 'yes')


def run(request, serving=False, port=0, confirm=confirm_overwrite):
    """Build once; when serving, keep serving and rebuilding until interrupted"""
    state = SiteBuilder(request, confirm=confirm).run()
    if state is not ExitState.SUCCESS:
        return state.exit_code
    if not serving:
        return 0

    rebuild_request = request.with_options(overwrite=True)

    def rebuild(event_type, path):
        SiteBuilder(rebuild_request).build()

    serve(request.origin, request.target, rebuild, port=port)
    return 0


def main(argv=None):
    argv = sys.argv[1:] if argv is None else list(argv)
    rest, toggles = split_flags(argv)
    parser = create_parser()
    args = parser.parse_args(rest)

    if not args.path:
        parser.print_help()
        return 0

    folder = Path(args.path)
    if not folder.is_dir():
        error(f"Folder not found: {args.path}")
        return 1
    if args.build is None and not args.serve:
        error("Missing required parameter: OPTIONS (--build FOLDER or --serve)")
        return 1
    if args.build == '':
        error("Missing required parameter: FOLDER")
        return 1

    # Serving into a fresh temporary folder never needs confirmation
    overwrite = args.yes or (args.serve and args.build is None)
    try:
        options = build_options(args, toggles, overwrite=overwrite)
    except OptionError as e:
        error(e)
        return 1

    if args.build:
        log(f"Building to: {args.build}", Colors.CYAN)
        return run(BuildRequest(folder, args.build, options), serving=args.serve, port=args.port)

    with ScopedBuildDir() as build_dir:
        log(f"Building to: {build_dir}", Colors.CYAN)
        return run(BuildRequest(folder, build_dir, options), serving=True, port=args.port)


if __name__ == '__main__':
    sys.exit(main())
