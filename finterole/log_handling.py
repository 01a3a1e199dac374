'''
Logging and console output
'''
import logging
import sys

SUCCESS = 25
logging.addLevelName(SUCCESS, 'SUCCESS')

LOGGER = logging.getLogger('finterole')
LOGGER.setLevel(logging.DEBUG)

OUTPUT_LOGGER = logging.getLogger('finterole.output')
OUTPUT_LOGGER.setLevel(logging.INFO)
OUTPUT_LOGGER.propagate = False

_LEVEL_COLORS = {
    'DEBUG': '\033[0;36m',
    'INFO': '\033[0;34m',
    'SUCCESS': '\033[0;32m',
    'WARNING': '\033[1;33m',
    'ERROR': '\033[0;31m',
    'CRITICAL': '\033[0;31m'}
_NO_COLOR = '\033[0m'

class LevelTagFormatter(logging.Formatter):
    '''
    Formats records as "[LEVEL] message", optionally coloring the level tag
    '''
    def __init__(self, color=False):
        super(LevelTagFormatter, self).__init__('%(message)s')
        self.color = color

    def format(self, record):
        message = super(LevelTagFormatter, self).format(record)
        tag = record.levelname
        if self.color and tag in _LEVEL_COLORS:
            return '%s[%s]%s %s' % (_LEVEL_COLORS[tag], tag, _NO_COLOR, message)
        return '[%s] %s' % (tag, message)

def _replace_handler(logger, handler):
    for existing in list(logger.handlers):
        if getattr(existing, '_finterole_console', False):
            logger.removeHandler(existing)
    handler._finterole_console = True
    logger.addHandler(handler)

def enable_console_logging(level='INFO', stream=None, color=None):
    '''
    Sends status messages and verbatim output to STDOUT. Calling it again
    replaces the handlers installed by the previous call.
    '''
    stream = stream or sys.stdout
    numeric_log_level = logging.INFO
    if level:
        numeric_log_level = getattr(logging, level.upper(), None)
        if not isinstance(numeric_log_level, int):
            raise ValueError('Invalid log level: %s' % level)
    if color is None:
        color = hasattr(stream, 'isatty') and stream.isatty()
    LOGGER.setLevel(numeric_log_level)

    status_handler = logging.StreamHandler(stream)
    status_handler.setFormatter(LevelTagFormatter(color=color))
    _replace_handler(LOGGER, status_handler)

    output_handler = logging.StreamHandler(stream)
    output_handler.setFormatter(logging.Formatter('%(message)s'))
    _replace_handler(OUTPUT_LOGGER, output_handler)

class ConsoleReporter(object):
    '''
    Output sink used by the provisioner and the CLI.

    Status messages go through the `finterole` logger and are subject to
    the configured log level. `emit` writes text verbatim (usage, role
    documents, gcloud commands to copy) and is never filtered.
    '''

    def __init__(self, logger=None, output_logger=None):
        self.logger = logger or LOGGER
        self.output_logger = output_logger or OUTPUT_LOGGER

    def info(self, message, *args):
        self.logger.info(message, *args)

    def success(self, message, *args):
        self.logger.log(SUCCESS, message, *args)

    def warning(self, message, *args):
        self.logger.warning(message, *args)

    def error(self, message, *args):
        self.logger.error(message, *args)

    def emit(self, text=''):
        for line in text.rstrip('\n').split('\n'):
            self.output_logger.info(line)
