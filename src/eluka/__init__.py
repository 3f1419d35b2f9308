"""Eluka -- binary classification front end for SVM backends."""

__version__ = "0.6.0"

from .backend import Backend, SVMBackend, read_predictions
from .bijection import Bijection
from .config import ModelConfig
from .datapoint import DataPoint, Datum, FeatureMapInput, TextInput, as_datum
from .errors import (
    BackendError,
    BackendPredictionError,
    BackendTimeoutError,
    BackendTrainingError,
    DuplicateCodeError,
    DuplicateKeyError,
    ElukaError,
    FeatureSelectionError,
    InvalidLabelError,
    NotFoundError,
    SparseFormatError,
    UntrainedModelError,
)
from .feature_selection import FeatureSelector, parse_selected_ids
from .features import FeatureSpace, FrozenFeatureSpace, feature_key, split_feature_key
from .model import ClassifierModel, label_bijection
from .models import BuildResult, Label, ModelState, Weighting
from .preprocessing import Analyzer, StandardAnalyzer
from .vectors import LabeledPoint, VectorCollection

__all__ = [
    # Core
    "ClassifierModel",
    "ModelConfig",
    "Label",
    "ModelState",
    "Weighting",
    "BuildResult",
    "label_bijection",
    # Encoding
    "Bijection",
    "FeatureSpace",
    "FrozenFeatureSpace",
    "feature_key",
    "split_feature_key",
    "DataPoint",
    "Datum",
    "TextInput",
    "FeatureMapInput",
    "as_datum",
    "VectorCollection",
    "LabeledPoint",
    # Text analysis
    "Analyzer",
    "StandardAnalyzer",
    # Backend
    "Backend",
    "SVMBackend",
    "read_predictions",
    "FeatureSelector",
    "parse_selected_ids",
    # Errors
    "ElukaError",
    "InvalidLabelError",
    "UntrainedModelError",
    "NotFoundError",
    "DuplicateKeyError",
    "DuplicateCodeError",
    "SparseFormatError",
    "BackendError",
    "BackendTrainingError",
    "BackendPredictionError",
    "BackendTimeoutError",
    "FeatureSelectionError",
]
