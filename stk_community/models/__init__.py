from stk_community.models.institution import Institution, InstitutionDetail, RequiredDocument, TestRequirement
from stk_community.models.page_content import PageContent
from stk_community.models.document import Document
from stk_community.models.admin import Admin
