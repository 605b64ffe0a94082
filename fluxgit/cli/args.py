"""CLI Argument Parsing"""

import argparse
import argcomplete

from fluxgit import __version__


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='flux-git',
        description='Git commands that understand feature/endpoint project structure',
        epilog='Example: flux-git commit weather/main'
    )

    parser.add_argument('-v', '--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('--root', type=str, metavar='PATH', help='Feature root (default: src/features/)')
    parser.add_argument('--verbose', action='store_true', help='Show debug info (resolved target, config source)')

    # Setup/config
    parser.add_argument('--display-config', action='store_true', help='Show current configuration')
    parser.add_argument('--init-config', action='store_true', help='Write a .fluxgitrc with defaults in the current directory')
    parser.add_argument('--install-completion', action='store_true', help='Install shell tab completion')

    sub = parser.add_subparsers(dest='command', metavar='COMMAND')

    commit = sub.add_parser('commit', help='Stage and commit changes for a feature, endpoint or file')
    commit.add_argument('target', nargs='*', help='weather | weather/main | weather/main.contract.ts (default: all changes)')
    commit.add_argument('-m', '--message', type=str, metavar='MSG', help='Use this message instead of generating one')
    commit.add_argument('-n', '--dry-run', action='store_true', help='Show what would be committed, commit nothing')

    sub.add_parser('save', help='Emergency checkpoint of everything')
    sub.add_parser('undo', help='Undo the last commit, keeping its changes staged')
    sub.add_parser('sync', help='Stash, pull and restore local changes')

    clean = sub.add_parser('clean', help='Discard all uncommitted changes')
    clean.add_argument('-y', '--yes', action='store_true', help='Do not ask for confirmation')

    sub.add_parser('status', help='Show changes grouped by feature')

    history = sub.add_parser('history', help='Recent commits for a feature, endpoint or file')
    history.add_argument('target', nargs='?', help='weather | weather/main | weather/main.contract.ts')
    history.add_argument('limit', nargs='?', type=int, help='Number of commits (default: 10)')

    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = build_parser()
    argcomplete.autocomplete(parser)
    args = parser.parse_args(argv)
    if args.command is None and not (args.display_config or args.init_config or args.install_completion):
        parser.print_help()
        parser.exit(1)
    return args
