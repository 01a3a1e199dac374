'''
Provides a command line interface for creating the FinteReadOnlyRole custom
role in an organization
'''

import argparse
from contextlib import contextmanager
import os
import signal
import sys
import threading
from finterole import exceptions, log_handling
from finterole.log_handling import ConsoleReporter
from finterole.models.provision_request import ProvisionRequest
from finterole.models.provisioner import Provisioner
from finterole.services.gcloud import GcloudService, DEFAULT_GCLOUD_BINARY

DESCRIPTION = '''
    Creates the FinteReadOnlyRole custom IAM role at organization level.

    The project is used as the context for the gcloud calls: it must exist,
    and the IAM API is enabled on it if it isn't already.
    '''

EPILOG = '''
Examples:
  %(prog)s --organization 123456789012 --project my-project-id

Note: The IAM API must be enabled in the specified project.
'''

HELP_FLAGS = ('-h', '--help')
LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')

class _ArgumentParser(argparse.ArgumentParser):
    '''
    ArgumentParser that raises instead of printing and exiting, so errors
    are reported the same way as the rest of the run
    '''
    def error(self, message):
        raise exceptions.ArgumentParsingException(message)

def _log_level(value):
    level = value.upper()
    if level not in LOG_LEVELS:
        raise argparse.ArgumentTypeError('valid values are %s' % ', '.join(LOG_LEVELS))
    return level

def _build_parser():
    parser = _ArgumentParser(
        prog='finterole', usage='%(prog)s [OPTIONS]', description=DESCRIPTION, epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False, allow_abbrev=False)
    # nargs='?' so an option given without a value is reported as missing
    parser.add_argument(
        '-o', '--organization', type=str, dest='organization', nargs='?', const='',
        metavar='ORG_ID', help='GCP Organization ID (required)')
    parser.add_argument(
        '-p', '--project', type=str, dest='project', nargs='?', const='',
        metavar='PROJECT_ID', help='GCP Project ID (required)')
    parser.add_argument(
        '-h', '--help', action='store_true', dest='help',
        help='Show this help message')
    parser.add_argument(
        '--gcloud-bin', type=str, dest='gcloud_bin',
        default=os.environ.get('FINTEROLE_GCLOUD_BIN', DEFAULT_GCLOUD_BINARY),
        help='Path to the gcloud binary. Defaults to $FINTEROLE_GCLOUD_BIN or gcloud.')
    parser.add_argument(
        '--log-level', type=_log_level, dest='log_level',
        default=os.environ.get('FINTEROLE_LOG_LEVEL', 'INFO'),
        help='The console log level to set. Valid values include %s' % ', '.join(LOG_LEVELS))
    parser.add_argument(
        '--no-color', action='store_true', dest='no_color',
        help='Do not color the status output.')
    return parser

def _raise_interrupted(signum, _frame):
    raise exceptions.TerminationSignal(signal.Signals(signum).name)

@contextmanager
def _termination_raises():
    '''
    Turns SIGTERM into an exception while the block runs so that cleanup
    in the provisioner still happens.
    '''
    if threading.current_thread() is not threading.main_thread():
        yield
        return
    previous_handler = signal.signal(signal.SIGTERM, _raise_interrupted)
    try:
        yield
    finally:
        signal.signal(signal.SIGTERM, previous_handler)

def _report_failure(reporter, err, parser):
    reporter.error('%s', err)
    if err.remediation:
        reporter.emit(err.remediation)
    if err.show_usage:
        reporter.emit('')
        reporter.emit(parser.format_help())

def run(argv=None, gcloud_service=None, reporter=None):
    '''
    Parses arguments and executes from the command line. Returns the exit code.
    '''
    argv = sys.argv[1:] if argv is None else list(argv)
    reporter = reporter or ConsoleReporter()
    parser = _build_parser()
    if any(arg in HELP_FLAGS for arg in argv):
        log_handling.enable_console_logging()
        reporter.emit(parser.format_help())
        return 0
    try:
        args, unknown_args = parser.parse_known_args(argv)
        if unknown_args:
            raise exceptions.UnknownArgumentException(unknown_args[0])
    except exceptions.ProvisioningException as err:
        log_handling.enable_console_logging()
        _report_failure(reporter, err, parser)
        return 1
    log_handling.enable_console_logging(level=args.log_level, color=False if args.no_color else None)
    if gcloud_service is None:
        gcloud_service = GcloudService(binary=args.gcloud_bin)
    request = ProvisionRequest(organization_id=args.organization, project_id=args.project)
    provisioner = Provisioner(gcloud_service=gcloud_service, reporter=reporter)
    try:
        with _termination_raises():
            provisioner.run(request)
    except exceptions.TerminationSignal as err:
        # delivered after the provisioner returned but before the handler was restored
        _report_failure(reporter, exceptions.ProvisioningInterruptedException(err.signal_name), parser)
        return 1
    except exceptions.ProvisioningException as err:
        _report_failure(reporter, err, parser)
        return 1
    return 0

def main():
    '''
    Console script entry point
    '''
    sys.exit(run())
