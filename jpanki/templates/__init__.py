"""Card templates with CSS and HTML."""

from typing import Dict, List


class CardTemplates:
    """Container for the Japanese polite/casual note templates and styling."""

    DEFAULT_STYLE: Dict[str, str] = {
        "card_bg": "#f4f6f9",
        "container_bg": "#ffffff",
        "text_color": "#333333",
        "header_text": "#ffffff",
        "label_color": "#adb5bd",
        "definition_color": "#212529",
        "section_border": "#f2f2f2",
        "card_radius": "12px",
        "card_shadow": "0 2px 10px rgba(0,0,0,0.05)",
        "polite_start": "#2c3e50",
        "polite_end": "#4ca1af",
    }

    CSS = """
    .card { font-family: "Hiragino Kaku Gothic Pro", "Noto Sans JP", "Yu Gothic", -apple-system, 'Segoe UI', sans-serif; font-size: 16px; line-height: 1.5; color: var(--text-color); background-color: var(--card-bg); margin: 0; padding: 0; }
    .card-container { background: var(--container-bg); border-radius: var(--card-radius); box-shadow: var(--card-shadow); overflow: hidden; max-width: 500px; margin: 10px auto; text-align: left; padding-bottom: 15px; }

    .header-box { padding: 25px 20px; text-align: center; color: var(--header-text) !important; font-weight: bold; background: linear-gradient(135deg, var(--polite-start), var(--polite-end)); }

    .word-main { font-size: 2.3em; font-weight: 800; margin: 0; line-height: 1.2; text-shadow: 0 2px 4px rgba(0,0,0,0.2); color: var(--header-text); }
    .word-meta { font-size: 0.95em; opacity: 0.9; margin-top: 8px; color: var(--header-text); }

    .section { padding: 12px 20px; border-bottom: 1px solid var(--section-border); }
    .label { font-size: 0.7em; text-transform: uppercase; color: var(--label-color); font-weight: 800; letter-spacing: 1.2px; display: block; margin-bottom: 6px; }
    .definition { font-size: 1.1em; font-weight: 600; color: var(--definition-color); }
    .sentence-jp { font-size: 1.3em; font-weight: 700; }
    .sentence-kana { font-size: 0.9em; color: var(--label-color); }
    .sentence-en { font-size: 0.95em; color: #666; margin-top: 4px; }

    .notes {
        font-style: italic; color: #555; background: #fff9db;
        padding: 12px; border-radius: 8px; font-size: 0.95em;
        border-left: 4px solid #f1c40f; line-height: 1.5;
    }

    .image-box img { display: block; max-width: 100%; max-height: 280px; margin: 0 auto; border-radius: 8px; }
    .replay-button svg { width: 28px; height: 28px; }

    .nightMode .card-container { background: #2b2b2b; }
    .nightMode .definition { color: #e9ecef; }
    .nightMode .notes { background: #3d3a28; color: #e9ecef; }
    """

    FRONT = """
<div class="card-container">
    <div class="header-box">
        <div class="word-main">{{Expression}}</div>
    </div>
    {{#Photo}}<div class="section image-box">{{Photo}}</div>{{/Photo}}
    {{AudioWord}}
</div>
"""

    BACK = """
<div class="card-container">
    <div class="header-box">
        <div class="word-main">{{Expression}}</div>
        <div class="word-meta">{{ExpressionKana}} · {{ExpressionReading}}</div>
    </div>
    {{#Photo}}<div class="section image-box">{{Photo}}</div>{{/Photo}}
    <div class="section">
        <span class="label">Meaning</span>
        <div class="definition">{{Meaning}}</div>
        {{AudioWord}}
    </div>
    {{#SentenceJP}}
    <div class="section">
        <span class="label">Casual</span>
        <div class="sentence-jp">{{SentenceJP}}</div>
        <div class="sentence-kana">{{SentenceJPKana}}</div>
        <div class="sentence-en">{{SentenceEN}}</div>
        {{AudioSentence}}
    </div>
    {{/SentenceJP}}
    {{#Notes}}
    <div class="section">
        <span class="label">Notes</span>
        <div class="notes">{{Notes}}</div>
    </div>
    {{/Notes}}
</div>
"""

    @classmethod
    def get_css(cls, style: Dict[str, str] = None) -> str:
        """
        Full card CSS with the style palette injected as CSS variables.

        Args:
            style: Overrides for DEFAULT_STYLE keys
        """
        palette = dict(cls.DEFAULT_STYLE)
        if style:
            palette.update(style)
        variables = "\n".join(
            f"    --{key.replace('_', '-')}: {value};" for key, value in palette.items()
        )
        return f":root {{\n{variables}\n}}\n{cls.CSS}"

    @classmethod
    def get_templates(cls) -> List[Dict[str, str]]:
        """genanki template definitions for the note model."""
        return [
            {
                'name': 'Recognition',
                'qfmt': cls.FRONT,
                'afmt': cls.BACK,
            }
        ]
