'''
Creates the FinteReadOnlyRole custom IAM role in a GCP organization
'''
__version__ = '0.1.0'
