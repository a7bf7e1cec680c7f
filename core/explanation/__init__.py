from core.explanation.interfaces import ExplanationComposer, ExplanationContent, ExplanationGenerator
from core.explanation.template import TemplateComposer, TemplateExplanationGenerator
from core.explanation.guarded import GuardedExplanationGenerator

__all__ = [
    'ExplanationComposer',
    'ExplanationContent',
    'ExplanationGenerator',
    'TemplateComposer',
    'TemplateExplanationGenerator',
    'GuardedExplanationGenerator',
]
