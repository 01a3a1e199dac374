'''
Provides ProvisionRequest
'''
import re
from finterole import exceptions

_ORGANIZATION_ID_PATTERN = re.compile(r'^[0-9]+$')
# Optional legacy "domain.com:" prefix, then a 6-30 character project id
_PROJECT_ID_PATTERN = re.compile(r'^(?:[a-z][a-z0-9.-]*[a-z0-9]:)?[a-z][a-z0-9-]{4,28}[a-z0-9]$')

def _normalize(value):
    if value is None:
        return ''
    return str(value).strip()

class ProvisionRequest(object):
    '''
    The organization and project a provisioning run targets.

    Values are stripped of surrounding whitespace; a blank value is treated
    the same as a missing one. Call #validate before using the request.
    '''

    def __init__(self, organization_id=None, project_id=None):
        self._organization_id = _normalize(organization_id)
        self._project_id = _normalize(project_id)

    @property
    def organization_id(self):
        return self._organization_id

    @property
    def project_id(self):
        return self._project_id

    def validate(self):
        '''
        Raises finterole.exceptions.MissingArgumentException when an identifier
        is absent and finterole.exceptions.InvalidArgumentException when one is
        not well formed. The organization is checked before the project.
        '''
        if not self._organization_id:
            raise exceptions.MissingArgumentException('Organization ID')
        if not self._project_id:
            raise exceptions.MissingArgumentException('Project ID')
        if not _ORGANIZATION_ID_PATTERN.match(self._organization_id):
            raise exceptions.InvalidArgumentException(
                'Organization ID', self._organization_id, 'a numeric organization id')
        if not _PROJECT_ID_PATTERN.match(self._project_id):
            raise exceptions.InvalidArgumentException(
                'Project ID', self._project_id,
                '6-30 lowercase letters, digits or hyphens starting with a letter')
        return self

    def __repr__(self):
        return 'ProvisionRequest(organization_id=%r, project_id=%r)' % (
            self._organization_id, self._project_id)
