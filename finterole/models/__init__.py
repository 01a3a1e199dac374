'''
Models used by the provisioning pipeline
'''
from finterole.models.project_context import ProjectContext
from finterole.models.provision_request import ProvisionRequest
from finterole.models.role_definition import RoleDefinition, build_finte_read_only_role
