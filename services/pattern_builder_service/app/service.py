"""Facade over tokenization, rule evaluation, pattern synthesis and validation."""

from collections.abc import Callable
from typing import Any

import structlog

from services.pattern_builder_service.app.cache.tokenization_cache import TokenizationCache
from services.pattern_builder_service.app.config import InferenceThresholds, Settings, get_settings
from services.pattern_builder_service.app.patterns.configuration import PatternConfiguration
from services.pattern_builder_service.app.patterns.extensions import ExtensionRecommendation, analyze_extension_usage
from services.pattern_builder_service.app.patterns.generator import PatternGenerator
from services.pattern_builder_service.app.rules.engine import RuleEngine
from services.pattern_builder_service.app.rules.models import RoleRule
from services.pattern_builder_service.app.tokenizer.inference import TypeInferenceEngine
from services.pattern_builder_service.app.tokenizer.models import ImageRole, Token, TokenAnalysis, TokenType
from services.pattern_builder_service.app.tokenizer.segments import (
    SegmentAction,
    UnknownSegmentHandler,
    UnknownSegmentSummary,
)
from services.pattern_builder_service.app.tokenizer.tokenizer import FilenameTokenizer
from services.pattern_builder_service.app.validation.models import ValidationResult
from services.pattern_builder_service.app.validation.preview import FilenamePreview, PreviewSummary, build_previews
from services.pattern_builder_service.app.validation.sample_validator import SampleValidator
from services.pattern_builder_service.app.worker import BackgroundAnalysisService, DebouncedValidator

logger = structlog.get_logger()


class PatternBuilderService:
    """Entry point for building and validating filename patterns."""

    def __init__(
        self,
        settings: Settings | None = None,
        thresholds: InferenceThresholds | None = None,
        cache: TokenizationCache | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            settings: Service settings; defaults to the cached environment settings
            thresholds: Type inference cut-offs
            cache: Cache to share; one is created from settings when omitted
        """
        self.settings = settings or get_settings()
        self.cache = cache or TokenizationCache(
            max_tokens=self.settings.cache_max_tokens,
            max_analyses=self.settings.cache_max_analyses,
            max_memory_mb=self.settings.cache_max_memory_mb,
        )
        self.inference = TypeInferenceEngine(thresholds)
        self.tokenizer = FilenameTokenizer(cache=self.cache, inference=self.inference)
        self.rule_engine = RuleEngine()
        self.generator = PatternGenerator(self.rule_engine)
        self.validator = SampleValidator(self.generator)
        self.segments = UnknownSegmentHandler()

    def tokenize(self, filename: str | None) -> list[Token]:
        return self.tokenizer.tokenize(filename)

    def analyze(self, filenames: list[str] | None) -> TokenAnalysis:
        """Analyze at most max_files_for_analysis filenames."""
        filenames = list(filenames or [])[: self.settings.max_files_for_analysis]
        analysis = self.tokenizer.analyze(filenames)
        logger.info("Analyzed sample set", files=analysis.file_count, suggestions=len(analysis.suggestions))
        return analysis

    def reclassify(self, token: Token, token_type: TokenType) -> Token:
        return self.inference.reclassify(token, token_type)

    def label_segment(self, segment_value: str, action: SegmentAction, custom_label: str | None = None) -> None:
        self.segments.label_segment(segment_value, action, custom_label)

    def unknown_segments(self, analysis: TokenAnalysis) -> UnknownSegmentSummary:
        """Summarize the UNKNOWN segments of an analysis against the stored labels."""
        return self.segments.summarize(analysis.tokenized_filenames)

    def apply_segment_labels(self, tokens: list[Token]) -> list[Token]:
        """
        Apply stored segment labels to a representative token list.

        Ignored segments are dropped and positions renumbered, so pick the
        group ID token from the returned list.
        """
        return self.segments.apply_labels(tokens)

    def suggest_rules(self, analysis: TokenAnalysis, existing_rules: list[RoleRule] | None = None) -> list[RoleRule]:
        return self.rule_engine.suggest_rules(analysis, existing_rules)

    def classify(self, filename: str, rules: list[RoleRule]) -> ImageRole | None:
        return self.rule_engine.classify(filename, rules)

    def generate_role_pattern(self, rules: list[RoleRule], role: ImageRole) -> str | None:
        return self.generator.generate_role_pattern(rules, role)

    def generate_group_pattern(self, tokens: list[Token], group_token: Token) -> str:
        return self.generator.generate_group_pattern(tokens, group_token)

    def validate_rules(self, rules: list[RoleRule] | None) -> ValidationResult:
        return self.rule_engine.validate_rules(rules)

    def recommend_extension_matching(self, filenames: list[str]) -> ExtensionRecommendation:
        return analyze_extension_usage(filenames)

    def build_configuration(
        self,
        tokens: list[Token],
        group_token: Token | None,
        rules: list[RoleRule],
        flexible_extensions: bool | None = None,
    ) -> PatternConfiguration:
        """Build a configuration; flexible_extensions defaults to the setting."""
        if flexible_extensions is None:
            flexible_extensions = self.settings.flexible_extensions
        config = self.generator.build_configuration(tokens, group_token, rules, flexible_extensions)
        logger.info(
            "Built pattern configuration",
            group_pattern=config.group_pattern,
            rules=len(rules),
            flexible_extensions=flexible_extensions,
        )
        return config

    def validate_configuration(
        self, config: PatternConfiguration | None, samples: list[str] | None = None
    ) -> ValidationResult:
        """Validate a configuration and test it against sample filenames."""
        samples = list(samples or [])[: self.settings.max_files_for_analysis]
        result = self.validator.validate(config, samples)
        logger.info(
            "Validated configuration",
            valid=result.is_valid,
            errors=[error.type.value for error in result.errors],
            warnings=[warning.type.value for warning in result.warnings],
        )
        return result

    def preview(
        self, filenames: list[str], config: PatternConfiguration
    ) -> tuple[list[FilenamePreview], PreviewSummary]:
        filenames = list(filenames)[: self.settings.max_files_for_analysis]
        return build_previews(filenames, config, self.validator)

    def cache_stats(self) -> dict[str, Any]:
        return self.cache.stats()

    def clear_cache(self) -> None:
        self.cache.clear_cache()
        logger.info("Cleared tokenization cache")

    def create_background_service(self) -> BackgroundAnalysisService:
        """Background worker sharing this service's tokenizer and cache."""
        return BackgroundAnalysisService(
            self.tokenizer, self.validator, max_files=self.settings.max_files_for_analysis
        )

    def create_debounced_validator(self, callback: Callable[[ValidationResult], None]) -> DebouncedValidator:
        return DebouncedValidator(self.validator, callback, delay_ms=self.settings.validation_debounce_ms)
