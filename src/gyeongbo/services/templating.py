"""jinja2 기반 경보 메시지 템플릿 렌더러."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple

from jinja2 import Environment, TemplateError

from ..data.models import Alert, AlertStatus
from ..errors import TemplateRenderFailed

DEFAULT_TITLE_TEMPLATE = (
    "[{{ status | upper }}{% if status == 'firing' %}:{{ firing | length }}{% endif %}] "
    "{{ common_labels.alertname | default('') }}"
)

DEFAULT_MESSAGE_TEMPLATE = """\
{% if firing %}
**Firing**
{% for alert in firing %}
{% if alert.annotations.summary %}{{ alert.annotations.summary }}
{% endif %}
Labels:
{% for key, value in alert.labels | dictsort %}
 - {{ key }} = {{ value }}
{% endfor %}
{% if alert.generator_url %}Source: {{ alert.generator_url }}
{% endif %}
{% endfor %}
{% endif %}
{% if resolved %}
**Resolved**
{% for alert in resolved %}
{% if alert.annotations.summary %}{{ alert.annotations.summary }}
{% endif %}
Labels:
{% for key, value in alert.labels | dictsort %}
 - {{ key }} = {{ value }}
{% endfor %}
{% endfor %}
{% endif %}
"""


def _common(mappings: Sequence[Dict[str, str]]) -> Dict[str, str]:
    if not mappings:
        return {}
    first, *rest = mappings
    return {
        key: value for key, value in first.items() if all(other.get(key) == value for other in rest)
    }


class TemplateRenderer:
    """경보 묶음을 템플릿 데이터로 넘겨 제목/본문을 렌더링한다."""

    def __init__(self, external_url: Optional[str] = None) -> None:
        self._external_url = external_url or ""
        self._environment = Environment(
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=False,
        )

    def template_data(self, alerts: Sequence[Alert]) -> Dict[str, Any]:
        items = [alert.template_data() for alert in alerts]
        firing = [item for item in items if item["status"] == AlertStatus.FIRING.value]
        resolved = [item for item in items if item["status"] == AlertStatus.RESOLVED.value]
        # 빈 묶음은 batch_status 와 같이 firing 으로 본다.
        return {
            "status": AlertStatus.RESOLVED.value if items and not firing else AlertStatus.FIRING.value,
            "alerts": items,
            "firing": firing,
            "resolved": resolved,
            "common_labels": _common([item["labels"] for item in items]),
            "common_annotations": _common([item["annotations"] for item in items]),
            "external_url": self._external_url,
        }

    def render(self, text: str, alerts: Sequence[Alert]) -> Tuple[str, Optional[TemplateRenderFailed]]:
        """렌더링 결과와 오류를 함께 반환한다.

        구문 오류면 빈 문자열을, 렌더링 도중 실패하면 그때까지 만들어진
        부분 결과를 오류와 함께 돌려준다.
        """

        try:
            template = self._environment.from_string(text)
        except TemplateError as exc:
            return "", TemplateRenderFailed(f"템플릿 구문 오류: {exc}", template=text)

        chunks: List[str] = []
        try:
            for chunk in template.generate(**self.template_data(alerts)):
                chunks.append(chunk)
        except Exception as exc:
            partial = "".join(chunks).strip()
            return partial, TemplateRenderFailed(f"템플릿 렌더링 실패: {exc}", template=text)
        return "".join(chunks).strip(), None


__all__ = [
    "DEFAULT_MESSAGE_TEMPLATE",
    "DEFAULT_TITLE_TEMPLATE",
    "TemplateRenderer",
]
