"""
Contracts services.

Usage:
    from apps.contracts.services import create_contract_if_needed, accept_contract
"""

from .exceptions import (
    ContractsServiceError,
    ContractNotFoundError,
    ContractTemplateNotFoundError,
    ContractAccessError,
    ContractAlreadyAcceptedError,
    EmptyContractTemplateError,
    ContractTripNotFoundError,
)
from .contract_management import (
    get_contract_template,
    save_contract_template,
    activate_contract_template,
    deactivate_contract_template,
    preview_contract,
    next_contract_number,
    create_contract_if_needed,
    get_contract_for_user,
    accept_contract,
    list_contracts,
    list_parent_contracts,
    delete_contracts,
)

__all__ = [
    # Exceptions
    'ContractsServiceError',
    'ContractNotFoundError',
    'ContractTemplateNotFoundError',
    'ContractAccessError',
    'ContractAlreadyAcceptedError',
    'EmptyContractTemplateError',
    'ContractTripNotFoundError',
    # Templates
    'get_contract_template',
    'save_contract_template',
    'activate_contract_template',
    'deactivate_contract_template',
    'preview_contract',
    # Contracts
    'next_contract_number',
    'create_contract_if_needed',
    'get_contract_for_user',
    'accept_contract',
    'list_contracts',
    'list_parent_contracts',
    'delete_contracts',
]
