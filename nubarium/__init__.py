"""Client for the Nubarium OCR document-processing API."""

from .client import (
    ENDPOINT_COMPROBANTE_DOMICILIO,
    NubariumClient,
    NubariumNonJSONResponseError,
    NubariumRequestError,
    NubariumResponseError,
    Response,
)
from .date import DateParser, EmptyDateError, MalformedDateError, new_date_parser, with_expiry_reference_date
from .models import ComprobanteDomicilioResponse, ComprobanteDomicilioValidaciones, StringOrObject
