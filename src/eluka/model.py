"""Binary classifier model driving an external SVM backend.

A ``ClassifierModel`` observes positive and negative examples, encodes
each one as a point in a shared feature space, and hands the resulting
sparse training file to the backend. Unlabeled inputs are later encoded
against a frozen view of the same space, predicted by the backend, and
decoded back into a :class:`~eluka.models.Label`.

Example::

    model = ClassifierModel(ModelConfig(directory="work"))
    model.add({"word||cat": 1}, "positive")
    model.add({"word||dog": 1}, "negative")
    model.build()
    model.classify({"word||cat": 1})  # Label.POSITIVE
"""

from __future__ import annotations

import json
import logging
import tempfile
from collections import Counter
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Union

from .backend import Backend, SVMBackend
from .bijection import Bijection
from .config import ModelConfig
from .datapoint import DataPoint, Datum, as_datum
from .errors import BackendError, BackendPredictionError, InvalidLabelError, UntrainedModelError
from .feature_selection import FeatureSelector
from .features import FeatureRef, FeatureSpace, split_feature_key
from .models import BuildResult, Label, ModelState
from .preprocessing import Analyzer, StandardAnalyzer
from .vectors import VectorCollection

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = "1.0"

RawInput = Union[Datum, str, Mapping[str, Any]]


def label_bijection() -> Bijection[Label, int]:
    """The fixed label coding: positive 1, negative -1, unknown 0."""
    labels: Bijection[Label, int] = Bijection()
    labels.insert(Label.POSITIVE, 1)
    labels.insert(Label.NEGATIVE, -1)
    labels.insert(Label.UNKNOWN, 0)
    return labels


class ClassifierModel:
    """Binary classifier over a vector-space encoding of its inputs.

    Args:
        config: Model settings; defaults to ``ModelConfig()``.
        backend: Trainer/predictor; defaults to an ``SVMBackend`` built
            from the config.
        analyzer: Tokenizer for text inputs; defaults to ``StandardAnalyzer``.
        selector: Feature-selection runner; defaults to a
            ``FeatureSelector`` built from the config.
    """

    TRAIN_FILE = "train"
    MODEL_FILE = "model"
    QUERY_FILE = "classify"
    RESULT_FILE = "result"

    def __init__(
        self,
        config: Optional[ModelConfig] = None,
        backend: Optional[Backend] = None,
        analyzer: Optional[Analyzer] = None,
        selector: Optional[FeatureSelector] = None,
    ) -> None:
        self.config = config or ModelConfig()
        self._labels = label_bijection()

        self._features = FeatureSpace()
        self._train = VectorCollection(self._features)
        self._analyzer = analyzer or StandardAnalyzer()
        self._backend = backend or SVMBackend(
            train_command=self.config.svm_train_path,
            predict_command=self.config.svm_predict_path,
            train_options=self.config.train_options,
            timeout=self.config.timeout,
            max_attempts=self.config.max_attempts,
        )
        self._selector = selector or FeatureSelector(
            command=self.config.fselect_path,
            timeout=self.config.timeout,
        )
        self._state = ModelState.UNTRAINED
        self.directory = self._prepare_directory(self.config.directory)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def state(self) -> ModelState:
        return self._state

    @property
    def is_trained(self) -> bool:
        return self._state == ModelState.TRAINED

    @property
    def feature_space(self) -> FeatureSpace:
        return self._features

    @property
    def training_set(self) -> VectorCollection:
        return self._train

    @property
    def labels(self) -> Bijection[Label, int]:
        return self._labels

    @property
    def train_path(self) -> Path:
        return self.directory / self.TRAIN_FILE

    @property
    def model_path(self) -> Path:
        return self.directory / self.MODEL_FILE

    @property
    def query_path(self) -> Path:
        return self.directory / self.QUERY_FILE

    @property
    def result_path(self) -> Path:
        return self.directory / self.RESULT_FILE

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def add(self, data: RawInput, label: Union[Label, str]) -> DataPoint:
        """Add a training example.

        Args:
            data: Text, a feature mapping, or a ``Datum``.
            label: ``positive`` or ``negative``.

        Returns:
            The encoded data point.

        Raises:
            InvalidLabelError: If ``label`` is not positive or negative.
                Nothing is recorded in that case.
        """
        parsed = Label.parse(label)
        if not parsed.is_trainable:
            raise InvalidLabelError(f"No meaningful label associated with data: {label!r}")
        datum = as_datum(data)

        point = DataPoint.build(datum, self._features, self._analyzer, self.config.weighting)
        self._train.add(point, self._labels.code_of(parsed))
        return point

    def build(self, feature_subset: Optional[Iterable[FeatureRef]] = None) -> BuildResult:
        """Write the training file and run the trainer.

        May be called again to retrain; the previous artifact is only
        replaced once the new training run succeeds.

        Args:
            feature_subset: Optional features (IDs, keys or ``(field, value)``
                tuples) to restrict the training file to.

        Raises:
            ValueError: If no examples have been added.
            BackendTrainingError: If the trainer fails.
            BackendTimeoutError: If the trainer exceeds the timeout.
        """
        if not len(self._train):
            raise ValueError("No training data. Call add() before build().")
        subset = self._resolve_subset(feature_subset)

        train_path = self._train.write(self.train_path, subset)
        staged = self.directory / f"{self.MODEL_FILE}.tmp"
        staged.unlink(missing_ok=True)
        logger.info(
            "Training on %d example(s) with %d feature(s)", len(self._train), len(self._features)
        )
        try:
            output = self._backend.train(train_path, staged)
        except BackendError:
            staged.unlink(missing_ok=True)
            raise
        staged.replace(self.model_path)
        self._state = ModelState.TRAINED

        counts = Counter(self._labels.key_of(code).value for code in self._train.labels())
        return BuildResult(
            train_path=train_path,
            model_path=self.model_path,
            example_count=len(self._train),
            feature_count=len(self._features),
            output=output,
            label_counts=dict(counts),
        )

    def classify(
        self,
        data: RawInput,
        feature_subset: Optional[Iterable[FeatureRef]] = None,
    ) -> Label:
        """Classify a single input.

        Features never seen during training are dropped; the feature
        space is not modified.

        Raises:
            UntrainedModelError: If ``build()`` has not succeeded yet.
            BackendPredictionError: If the predictor fails.
            BackendTimeoutError: If the predictor exceeds the timeout.
        """
        return self.classify_batch([data], feature_subset)[0]

    def classify_batch(
        self,
        data: Iterable[RawInput],
        feature_subset: Optional[Iterable[FeatureRef]] = None,
    ) -> list[Label]:
        """Classify several inputs with a single predictor call.

        Raises:
            TypeError: If ``data`` is a single text or mapping rather than
                a collection of inputs.
        """
        if isinstance(data, (str, Mapping, Datum)):
            raise TypeError("classify_batch() takes a collection of inputs; use classify() for one")
        if not self.is_trained:
            raise UntrainedModelError("Untrained model. Call build() first.")
        datums = [as_datum(d) for d in data]
        if not datums:
            return []
        subset = self._resolve_subset(feature_subset)

        frozen = self._features.frozen()
        query = VectorCollection(self._features)
        for datum in datums:
            query.add(DataPoint.build(datum, frozen, self._analyzer, self.config.weighting))

        query_path = query.write(self.query_path, subset)
        predictions = self._backend.predict(query_path, self.model_path, self.result_path)
        if len(predictions) != len(query):
            raise BackendPredictionError(
                f"Expected {len(query)} prediction(s), got {len(predictions)}",
                paths=[query_path, self.result_path],
            )
        return [self.decode(code) for code in predictions]

    def decode(self, code: int) -> Label:
        """Map a backend label code to a Label; unknown codes give ``Label.UNKNOWN``."""
        if self._labels.has_code(code):
            return self._labels.key_of(code)
        logger.debug("Backend returned unrecognized label code %r", code)
        return Label.UNKNOWN

    def suggest_features(self) -> list[Union[str, tuple[str, str]]]:
        """Ask the feature-selection script for the most useful features.

        Returns:
            Feature names, best first. Categorical features come back as
            ``(field, value)`` tuples. The list can be passed to
            ``build()`` or ``classify()`` as ``feature_subset``.

        Raises:
            ValueError: If no examples have been added.
            FeatureSelectionError: If the script fails.
        """
        if not len(self._train):
            raise ValueError("No training data. Call add() before suggest_features().")
        train_path = self._train.write(self.train_path)
        ids = self._selector.select(train_path)
        return [split_feature_key(self._features.key_for(fid)) for fid in ids]

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, path: Union[str, Path]) -> None:
        """Save the feature space, training examples and state as JSON.

        The model artifact itself stays in the working directory.
        """
        data = {
            "version": SNAPSHOT_VERSION,
            "state": self._state.value,
            "directory": str(self.directory),
            "config": self.config.to_dict(),
            "features": self._features.to_dict(),
            "training": [
                {"label": entry.label, "pairs": [list(pair) for pair in entry.point.pairs]}
                for entry in self._train
            ],
        }
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

    @classmethod
    def load(
        cls,
        path: Union[str, Path],
        backend: Optional[Backend] = None,
        analyzer: Optional[Analyzer] = None,
        selector: Optional[FeatureSelector] = None,
        **config_overrides,
    ) -> "ClassifierModel":
        """Restore a model saved with :meth:`save`.

        Keyword overrides replace fields of the saved config. A model saved
        as trained comes back untrained if its artifact has disappeared.
        """
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)

        config = ModelConfig.from_dict(data["config"])
        if config.directory is None:
            config.directory = Path(data["directory"])
        config = config.with_overrides(**config_overrides)

        model = cls(config=config, backend=backend, analyzer=analyzer, selector=selector)
        model._features = FeatureSpace.from_dict(data["features"])
        model._train = VectorCollection(model._features)
        for entry in data.get("training", []):
            pairs = [(int(fid), value) for fid, value in entry["pairs"]]
            model._train.add(DataPoint.from_pairs(pairs, space=model._features), entry["label"])

        if ModelState(data.get("state", "untrained")) == ModelState.TRAINED:
            if model.model_path.exists():
                model._state = ModelState.TRAINED
            else:
                logger.warning("Model artifact %s is missing; rebuild required", model.model_path)
        return model

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _resolve_subset(
        self,
        feature_subset: Optional[Iterable[FeatureRef]],
    ) -> Optional[frozenset[int]]:
        if feature_subset is None:
            return None
        return self._features.selected_subset(feature_subset)

    @staticmethod
    def _prepare_directory(directory: Optional[Path]) -> Path:
        if directory is None:
            path = Path(tempfile.mkdtemp(prefix="eluka-"))
            logger.warning("No directory specified for the model. Using %s instead.", path)
            return path
        path = Path(directory).expanduser()
        path.mkdir(parents=True, exist_ok=True)
        return path.resolve()

    def __repr__(self) -> str:
        return (
            f"ClassifierModel(state={self._state.value}, examples={len(self._train)}, "
            f"features={len(self._features)}, directory={str(self.directory)!r})"
        )
