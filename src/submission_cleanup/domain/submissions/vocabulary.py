"""IRIs of the vocabularies used by submissions and their dependents."""

from __future__ import annotations

from enum import StrEnum

RDF_TYPE = "http://www.w3.org/1999/02/22-rdf-syntax-ns#type"

MU = "http://mu.semte.ch/vocabularies/core/"
MU_UUID = f"{MU}uuid"

MU_ACCOUNT = "http://mu.semte.ch/vocabularies/account/"
MU_ACCOUNT_KEY = f"{MU_ACCOUNT}key"
MU_ACCOUNT_CAN_ACT_ON_BEHALF_OF = f"{MU_ACCOUNT}canActOnBehalfOf"

MEB_SUBMISSION = "http://rdf.myexperiment.org/ontologies/base/Submission"
ADMS_STATUS = "http://www.w3.org/ns/adms#status"
PROV_GENERATED = "http://www.w3.org/ns/prov#generated"
PAV_CREATED_BY = "http://purl.org/pav/createdBy"
PAV_PROVIDED_BY = "http://purl.org/pav/providedBy"
FOAF_AGENT = "http://xmlns.com/foaf/0.1/Agent"

MELDING_FORM_DATA = "http://lblod.data.gift/vocabularies/automatische-melding/FormData"
EXT_SUBMISSION_DOCUMENT = "http://mu.semte.ch/vocabularies/ext/SubmissionDocument"

DCT = "http://purl.org/dc/terms/"
DCT_SUBJECT = f"{DCT}subject"
DCT_SOURCE = f"{DCT}source"
DCT_TYPE = f"{DCT}type"
DCT_HAS_PART = f"{DCT}hasPart"
DCT_IS_PART_OF = f"{DCT}isPartOf"
DCT_CREATED = f"{DCT}created"
DCT_CREATOR = f"{DCT}creator"
DCT_REFERENCES = f"{DCT}references"

NIE = "http://www.semanticdesktop.org/ontologies/2007/01/19/nie#"
NIE_DATA_SOURCE = f"{NIE}dataSource"
NIE_HAS_PART = f"{NIE}hasPart"

NFO = "http://www.semanticdesktop.org/ontologies/2007/03/22/nfo#"
NFO_FILE_DATA_OBJECT = f"{NFO}FileDataObject"
NFO_REMOTE_DATA_OBJECT = f"{NFO}RemoteDataObject"

TASK = "http://redpencil.data.gift/vocabularies/tasks/"
TASK_TASK = f"{TASK}Task"
TASK_OPERATION = f"{TASK}operation"
TASK_INPUT_CONTAINER = f"{TASK}inputContainer"
TASK_RESULTS_CONTAINER = f"{TASK}resultsContainer"
TASK_HAS_HARVESTING_COLLECTION = f"{TASK}hasHarvestingCollection"
TASK_OPERATION_REGISTER = "http://lblod.data.gift/id/jobs/concept/TaskOperation/register"

OSLC = "http://open-services.net/ns/core#"
OSLC_ERROR = f"{OSLC}Error"
OSLC_MESSAGE = f"{OSLC}message"
OSLC_LARGE_PREVIEW = f"{OSLC}largePreview"

SENT_STATUS = "http://lblod.data.gift/concepts/9bd8d86d-bb10-4456-a84e-91e9507c374c"
"""Terminal submission status; submissions in this state are never deleted."""


class FileType(StrEnum):
    """Type tags of the derivative files attached to a submission document."""

    ADDITIONS = "http://data.lblod.gift/concepts/additions-file-type"
    REMOVALS = "http://data.lblod.gift/concepts/removals-file-type"
    META = "http://data.lblod.gift/concepts/meta-file-type"
    FORM_DATA = "http://data.lblod.gift/concepts/form-data-file-type"
