"""
Bidirectional Test Scaled Score <-> Vertical Scaled Score converter.

Each assessment gets its own ScoreConverter built from a fixed LinearFit.
A single number is converted forward when it is at or below the scale
boundary (it looks like a Test Scaled Score) and inverted otherwise (it looks
like a Vertical Scaled Score). Out-of-range and negative inputs are not
rejected; the same formula is applied to them.
"""

import logging
import math
import numbers
from collections.abc import Mapping

from config import ASSESSMENT_NAMES, SCALE_BOUNDARY
from regression import fit_assessment
from scores import ordered_assessment_names

logger = logging.getLogger(__name__)

FORWARD = 'forward'
INVERSE = 'inverse'

TEST_SCALE_LABEL = 'Test Scaled Score'
VERTICAL_SCALE_LABEL = 'Vertical Scaled Score'

SCALES = {
    FORWARD: (TEST_SCALE_LABEL, VERTICAL_SCALE_LABEL),
    INVERSE: (VERTICAL_SCALE_LABEL, TEST_SCALE_LABEL),
}

# Fits with a slope this close to zero cannot be inverted
SLOPE_TOLERANCE = 1e-9


class InputError(ValueError):
    """Raised when a submitted score is not a number."""


class UnknownAssessmentError(KeyError):
    """Raised when no converter exists for an assessment name."""

    def __str__(self):
        return f"Unknown assessment: {self.args[0]}"


def parse_score(raw):
    """Coerce user input to a finite float or raise InputError."""
    if raw is None or isinstance(raw, bool):
        raise InputError(f"Score must be a number, got {raw!r}")

    if isinstance(raw, numbers.Real):
        try:
            value = float(raw)
        except OverflowError:
            raise InputError(f"Score is too large to convert, got {raw!r}") from None
    elif isinstance(raw, str):
        text = raw.strip()
        if not text:
            raise InputError("Score is required")
        try:
            value = float(text)
        except ValueError:
            raise InputError(f"Score must be a number, got {raw!r}") from None
    else:
        raise InputError(f"Score must be a number, got {type(raw).__name__}")

    if not math.isfinite(value):
        raise InputError(f"Score must be a finite number, got {raw!r}")
    return value


def _round_score(converted, score):
    if not math.isfinite(converted):
        raise InputError(f"Score is too large to convert, got {score!r}")
    return round(converted)


class ScoreConverter:
    """Converts scores for one assessment using its LinearFit."""

    def __init__(self, fit, boundary=SCALE_BOUNDARY, n=None):
        if math.isclose(fit.slope, 0.0, abs_tol=SLOPE_TOLERANCE):
            raise ValueError("Cannot build a converter from a fit with zero slope")
        self.fit = fit
        self.boundary = boundary
        self.n = n

    def __repr__(self):
        return f"ScoreConverter(slope={self.fit.slope:.4f}, intercept={self.fit.intercept:.2f})"

    @classmethod
    def from_dataset(cls, dataset, boundary=SCALE_BOUNDARY):
        fit, _ = fit_assessment(dataset)
        return cls(fit, boundary=boundary, n=len(dataset))

    def direction_for(self, score):
        return FORWARD if score <= self.boundary else INVERSE

    def to_vertical(self, test_score):
        return _round_score(self.fit.forward(test_score), test_score)

    def to_test(self, vertical_score):
        return _round_score(self.fit.inverse(vertical_score), vertical_score)

    def convert(self, score):
        """Convert a score to the other scale. Raises InputError for non-numeric input."""
        value = parse_score(score)
        if self.direction_for(value) == FORWARD:
            return self.to_vertical(value)
        return self.to_test(value)


class ConversionResult(dict):
    """JSON-ready outcome of one conversion request."""

    @classmethod
    def build(cls, assessment, value, output, direction):
        input_scale, output_scale = SCALES[direction]
        return cls(
            assessment=assessment,
            input=value,
            output=output,
            direction=direction,
            input_scale=input_scale,
            output_scale=output_scale,
            label=f"{input_scale} → {output_scale}",
        )


class ConverterRegistry(Mapping):
    """Explicit assessment name -> ScoreConverter mapping, in display order."""

    def __init__(self, converters):
        self._converters = dict(converters)

    def __getitem__(self, name):
        return self._converters[name]

    def __iter__(self):
        return iter(self._converters)

    def __len__(self):
        return len(self._converters)

    def get_converter(self, name):
        try:
            return self._converters[name]
        except KeyError:
            raise UnknownAssessmentError(name) from None

    @classmethod
    def from_datasets(cls, datasets, order=ASSESSMENT_NAMES, boundary=SCALE_BOUNDARY):
        """
        Fit one converter per AssessmentDataset.
        Names listed in order come first in that order; any others follow
        alphabetically. Datasets that cannot be fitted are logged and skipped.
        """
        names = ordered_assessment_names(datasets, order)

        missing = [n for n in order if n not in datasets]
        if missing:
            logger.warning(f"No score data for: {', '.join(missing)}")

        converters = {}
        for name in names:
            try:
                converters[name] = ScoreConverter.from_dataset(datasets[name], boundary=boundary)
            except ValueError as e:
                logger.warning(f"Skipping {name}: {e}")
        return cls(converters)

    def convert(self, assessment, raw_score):
        """Validate, dispatch to the assessment's converter and format the result."""
        converter = self.get_converter(assessment)
        value = parse_score(raw_score)
        direction = converter.direction_for(value)
        output = converter.convert(value)
        logger.info(f"{assessment}: {value:g} -> {output} ({direction})")
        return ConversionResult.build(assessment, value, output, direction)

    def describe(self):
        """Fit parameters for every assessment, in display order."""
        return [
            {
                'name': name,
                'slope': conv.fit.slope,
                'intercept': conv.fit.intercept,
                'n': conv.n,
            }
            for name, conv in self._converters.items()
        ]
