# SPDX-License-Identifier: MIT
from .words import WordReader, byteswap, pack_word
from .header import DeviceType, HeaderFields, artifact_name, parse_artifact_name, provisional_name
from .extract import (
    Artifact, ExtractionError, ExtractionResult, Extractor, Failure, FailureKind,
    SinkOpenFailure, SourceOpenFailure, WriteFailure,
)
