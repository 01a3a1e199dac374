'''
Provides Provisioner
'''
import pyaml
from finterole import exceptions, helpers
from finterole.models.project_context import ProjectContext
from finterole.models.role_definition import build_finte_read_only_role
from finterole.log_handling import LOGGER as logger

IAM_API = 'iam.googleapis.com'

STATE_START = 'start'
STATE_VALIDATED = 'validated'
STATE_ENVIRONMENT_CHECKED = 'environment_checked'
STATE_PROJECT_RESOLVED = 'project_resolved'
STATE_API_ENABLED = 'api_enabled'
STATE_ROLE_DEFINED = 'role_defined'
STATE_ROLE_CREATED = 'role_created'
STATE_DONE = 'done'
STATE_FAILED = 'failed'

_BINDING_PRINCIPALS = (
    ('You can now assign this role to users or service accounts using:',
     'user:email@domain.com'),
    ('Or to assign to a service account:',
     'serviceAccount:service-account@project.iam.gserviceaccount.com'))

# pylint: disable=too-many-instance-attributes
class Provisioner(object):
    '''
    Creates a custom role at organization scope by running a fixed sequence
    of steps against gcloud:

    1. validate the request
    2. check that gcloud is installed and authenticated
    3. resolve the project every later call is scoped to
    4. make sure the IAM API is enabled on that project
    5. write the role definition to a temporary file
    6. create the role, then describe it for confirmation

    Steps run in order and the first failure raises a
    finterole.exceptions.ProvisioningException, leaving `state` at `failed`
    and the exception in `failure_reason`. Nothing is retried or rolled back;
    read-only checks always come before the first mutating call.

    #### Instance attributes

    - `gcloud_service`: A finterole.services.gcloud.GcloudService (or anything
    with the same methods).
    - `reporter`: The output sink, see finterole.log_handling.ConsoleReporter.
    - `role_definition`: The RoleDefinition to create. Defaults to
    FinteReadOnlyRole.
    - `required_api`: The service API that must be enabled on the project.
    - `state`: The last step completed, one of the `STATE_*` constants.
    - `project_context`: The ProjectContext resolved during the run.
    - `created_role`: The role as described by the server after creation.
    '''

    def __init__(self, gcloud_service, reporter, role_definition=None, required_api=IAM_API):
        self.gcloud_service = gcloud_service
        self.reporter = reporter
        self.role_definition = role_definition
        self.required_api = required_api
        self.state = STATE_START
        self.failure_reason = None
        self.project_context = None
        self.created_role = None

    @property
    def binary(self):
        return getattr(self.gcloud_service, 'binary', 'gcloud')

    def run(self, request):
        '''
        Executes the whole sequence for the provided ProvisionRequest and
        returns the created role as described by the server.
        '''
        if self.state != STATE_START:
            raise RuntimeError('A Provisioner can only be run once')
        try:
            try:
                self._run_steps(request)
            except KeyboardInterrupt:
                raise exceptions.ProvisioningInterruptedException('SIGINT')
            except exceptions.TerminationSignal as err:
                raise exceptions.ProvisioningInterruptedException(err.signal_name)
        except exceptions.ProvisioningException as err:
            logger.debug('Provisioning failed after state %s', self.state)
            self.state = STATE_FAILED
            self.failure_reason = err
            raise
        return self.created_role

    def _run_steps(self, request):
        request.validate()
        self.state = STATE_VALIDATED
        self.check_environment()
        self.state = STATE_ENVIRONMENT_CHECKED
        self.project_context = self.resolve_project(request.project_id)
        self.state = STATE_PROJECT_RESOLVED
        self.activate_api(self.project_context)
        self.state = STATE_API_ENABLED
        if self.role_definition is None:
            self.role_definition = build_finte_read_only_role()
        self.reporter.info('Creating role definition file...')
        document = self.role_definition.render()
        with helpers.transient_file(document) as role_file:
            self.reporter.info('Role definition created:')
            self.reporter.emit(document)
            self.state = STATE_ROLE_DEFINED
            self.created_role = self.create_role(
                organization_id=request.organization_id,
                project_context=self.project_context,
                role_file=role_file)
        self.state = STATE_ROLE_CREATED
        self._report_completion(request)
        self.state = STATE_DONE

    def check_environment(self):
        '''
        Raises ClientNotInstalledException when gcloud is not on the PATH and
        NotAuthenticatedException when it has no active account.
        '''
        if not self.gcloud_service.is_installed():
            raise exceptions.ClientNotInstalledException(self.binary)
        try:
            accounts = self.gcloud_service.list_active_accounts()
        except exceptions.GcloudCommandException as err:
            logger.debug('Listing active accounts failed: %s', err)
            raise exceptions.NotAuthenticatedException(self.binary)
        if not accounts:
            raise exceptions.NotAuthenticatedException(self.binary)
        logger.debug('Authenticated as %s', accounts[0])

    def resolve_project(self, project_id):
        '''
        Confirms the project exists and is accessible and returns the
        ProjectContext later calls are scoped to.
        '''
        self.reporter.info('Validating project: %s', project_id)
        try:
            describe_response = self.gcloud_service.describe_project(project_id)
        except exceptions.GcloudCommandException as err:
            logger.debug('Describing project failed: %s', err)
            raise exceptions.ProjectNotFoundException(project_id)
        context = ProjectContext.from_describe_response(project_id, describe_response)
        self.reporter.info('Setting project context to: %s', context.project_id)
        return context

    def activate_api(self, project_context):
        '''
        Enables the required API on the project unless it already is.
        Returns True when it had to be enabled, False when it already was.
        '''
        project_id = project_context.project_id
        self.reporter.info('Checking if %s is enabled in project: %s', self.required_api, project_id)
        try:
            enabled = self.gcloud_service.is_service_enabled(
                api_name=self.required_api, project_id=project_id)
        except exceptions.GcloudCommandException as err:
            logger.debug('Listing enabled services failed, assuming %s is not enabled: %s',
                         self.required_api, err)
            enabled = False
        if enabled:
            self.reporter.success('%s is already enabled', self.required_api)
            return False
        self.reporter.warning("%s is not enabled in project '%s'", self.required_api, project_id)
        self.reporter.info('Enabling %s...', self.required_api)
        try:
            self.gcloud_service.enable_service(api_name=self.required_api, project_id=project_id)
        except exceptions.GcloudCommandException as err:
            logger.debug('Enabling %s failed: %s', self.required_api, err)
            raise exceptions.ApiActivationFailedException(self.required_api, project_id, self.binary)
        self.reporter.success('%s enabled successfully', self.required_api)
        return True

    def create_role(self, organization_id, project_context, role_file):
        '''
        Creates the role at organization scope from role_file, then describes
        it and displays the result. An existing role is a failure; it is
        never updated in place.
        '''
        role_id = self.role_definition.role_id
        self.reporter.info('Creating custom role at organization level for organization: %s',
                           organization_id)
        try:
            self.gcloud_service.create_role(role_id=role_id,
                                            organization_id=organization_id,
                                            role_file=role_file,
                                            project_id=project_context.project_id)
        except exceptions.GcloudCommandException as err:
            raise exceptions.RoleCreationFailedException(role_id, organization_id, err.stderr or str(err))
        self.reporter.success("Custom role '%s' created successfully in organization '%s'",
                              role_id, organization_id)
        try:
            created_role = self.gcloud_service.describe_role(role_id=role_id,
                                                             organization_id=organization_id,
                                                             project_id=project_context.project_id)
        except exceptions.GcloudCommandException as err:
            raise exceptions.RoleDescribeFailedException(role_id, organization_id, err.stderr or str(err))
        self.reporter.info('Role details:')
        self.reporter.emit(pyaml.dump(created_role))
        self._warn_on_drift(created_role)
        return created_role

    def _warn_on_drift(self, created_role):
        expected = self.role_definition.comparable_attributes()
        actual = {key: created_role.get(key) for key in expected}
        difference = helpers.deep_diff(expected, actual)
        if difference:
            self.reporter.warning('The created role differs from the submitted definition: %s',
                                  difference.to_json())

    def _report_completion(self, request):
        role_name = self.role_definition.organization_role_name(request.organization_id)
        self.reporter.success('Role provisioning completed successfully!')
        self.reporter.info('Role created at organization level using project context: %s',
                           self.project_context.project_id)
        self.reporter.info('Note: %s was enabled/verified in project: %s',
                           self.required_api, self.project_context.project_id)
        for heading, member in _BINDING_PRINCIPALS:
            self.reporter.info(heading)
            self.reporter.emit(binding_command(self.binary, request.organization_id, member, role_name))

def binding_command(binary, organization_id, member, role_name):
    '''
    Returns the gcloud command that binds role_name to member at organization scope
    '''
    return ('  %s organizations add-iam-policy-binding %s \\\n'
            '    --member="%s" \\\n'
            '    --role="%s"') % (binary, organization_id, member, role_name)
