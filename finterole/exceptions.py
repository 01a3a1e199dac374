'''
Exceptions
'''
import pyaml

class ProvisioningException(Exception):
    '''
    Base class for errors that abort a provisioning run.

    `show_usage` indicates the CLI should print usage after the error and
    `remediation` holds text the operator can run to fix the problem by hand.
    '''
    show_usage = False
    remediation = None

class MissingArgumentException(ProvisioningException):
    '''
    Indicates that a required identifier was not provided
    '''
    show_usage = True

    def __init__(self, parameter):
        self.parameter = parameter
        message = "%s is required" % parameter
        ProvisioningException.__init__(self, message)

class UnknownArgumentException(ProvisioningException):
    '''
    Indicates that an unrecognized option was passed on the command line
    '''
    show_usage = True

    def __init__(self, argument):
        self.argument = argument
        message = "Unknown option: %s" % argument
        ProvisioningException.__init__(self, message)

class InvalidArgumentException(ProvisioningException):
    '''
    Indicates that an identifier was provided but is not well formed
    '''
    show_usage = True

    def __init__(self, parameter, value, expected):
        self.parameter = parameter
        self.value = value
        message = "%s '%s' is invalid: expected %s" % (parameter, value, expected)
        ProvisioningException.__init__(self, message)

class ClientNotInstalledException(ProvisioningException):
    '''
    Indicates that the gcloud binary could not be found on the PATH
    '''
    def __init__(self, binary):
        self.binary = binary
        message = "%s CLI is not installed. Please install it first." % binary
        ProvisioningException.__init__(self, message)

class NotAuthenticatedException(ProvisioningException):
    '''
    Indicates that gcloud has no active authenticated account
    '''
    def __init__(self, binary='gcloud'):
        message = "No active %s authentication found. Please run '%s auth login'" % (binary, binary)
        ProvisioningException.__init__(self, message)

class ProjectNotFoundException(ProvisioningException):
    '''
    Indicates that the project does not exist or the caller has no access to it.
    The API does not let us tell those apart so both get the same message.
    '''
    def __init__(self, project_id):
        self.project_id = project_id
        message = "Project '%s' not found or you don't have access to it" % project_id
        ProvisioningException.__init__(self, message)

class ApiActivationFailedException(ProvisioningException):
    '''
    Indicates that enabling a service API on the project was rejected
    '''
    def __init__(self, api_name, project_id, binary='gcloud'):
        self.api_name = api_name
        self.project_id = project_id
        self.remediation = '  %s services enable %s --project=%s' % (binary, api_name, project_id)
        message = "Failed to enable %s in project '%s'. Please enable it manually:" % (api_name, project_id)
        ProvisioningException.__init__(self, message)

class RoleCreationFailedException(ProvisioningException):
    '''
    Indicates that the custom role could not be created at organization scope,
    e.g. because it already exists or the caller lacks permission
    '''
    def __init__(self, role_id, organization_id, detail=None):
        self.role_id = role_id
        self.organization_id = organization_id
        self.detail = detail
        #pylint: disable=line-too-long
        message = "Failed to create custom role '%s' in organization '%s'" % (role_id, organization_id)
        if detail:
            message = '%s:\n%s' % (message, pyaml.dump({'details': detail}).rstrip())
        ProvisioningException.__init__(self, message)

class InvalidRoleStageException(ProvisioningException):
    '''
    Indicates that a role definition was given a stage that is not a valid
    custom role launch stage
    '''
    def __init__(self, stage, valid_stages):
        message = "Invalid role stage '%s'. Valid stages: %s" % (stage, ', '.join(valid_stages))
        ProvisioningException.__init__(self, message)

class ProvisioningInterruptedException(ProvisioningException):
    '''
    Indicates that the run was interrupted by a signal before it completed
    '''
    def __init__(self, signal_name):
        self.signal_name = signal_name
        message = "Interrupted by %s; changes applied so far were left in place" % signal_name
        ProvisioningException.__init__(self, message)

class GcloudCommandException(Exception):
    '''
    Indicates that a gcloud invocation exited non-zero or returned output
    that could not be parsed
    '''
    def __init__(self, command, returncode, stderr):
        self.command = command
        self.returncode = returncode
        self.stderr = (stderr or '').strip()
        message = "Command '%s' failed with exit code %s" % (' '.join(command), returncode)
        if self.stderr:
            message = '%s: %s' % (message, self.stderr)
        Exception.__init__(self, message)

class ArgumentParsingException(ProvisioningException):
    '''
    Indicates that the command line could not be parsed, e.g. an option
    value was rejected
    '''
    show_usage = True

class RoleDescribeFailedException(ProvisioningException):
    '''
    Indicates that the custom role was created but could not be described
    afterwards. The role exists, so running again will fail with ALREADY_EXISTS.
    '''
    def __init__(self, role_id, organization_id, detail=None):
        self.role_id = role_id
        self.organization_id = organization_id
        self.detail = detail
        #pylint: disable=line-too-long
        message = "Custom role '%s' was created in organization '%s' but could not be described" % (role_id, organization_id)
        if detail:
            message = '%s:\n%s' % (message, pyaml.dump({'details': detail}).rstrip())
        ProvisioningException.__init__(self, message)

class TerminationSignal(BaseException):
    '''
    Raised from a signal handler when the process is asked to terminate.
    Derives from BaseException so that handlers catching Exception (such as
    logging.Handler.emit) cannot swallow it; the provisioner turns it into
    ProvisioningInterruptedException.
    '''
    def __init__(self, signal_name):
        self.signal_name = signal_name
        BaseException.__init__(self, signal_name)
