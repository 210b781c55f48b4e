"""
AI product-content generator for the admin back-office.

Input: product type, metal, metal weight, gems, optional description and photos
Output: ProductContent dict
    {title, tagline, short_description, detailed_description, image_insights,
     price_usd, price_inr, source}

Gemini writes the copy. Prices are NEVER AI-provided — they always come from
JewelryPricer. Photos are shrunk before upload to keep requests small.

Graceful fallback: if Gemini is unavailable or returns junk, template copy is
produced. The admin form never fails because the AI is down.
"""

import base64
import io
import json
import logging
import urllib.request
from typing import Optional

from PIL import Image, ImageOps

from .config import settings
from .jewelry_pricer import JewelryPricer

logger = logging.getLogger(__name__)

MAX_IMAGE_EDGE = 1024
JPEG_QUALITY = 80
MAX_IMAGES = 4

CONTENT_FIELDS = ["title", "tagline", "short_description", "detailed_description", "image_insights"]


def compress_image(image_bytes: bytes, max_edge: int = MAX_IMAGE_EDGE, quality: int = JPEG_QUALITY) -> bytes:
    """
    Downscale so the longest edge is at most max_edge and re-encode as JPEG.
    EXIF rotation is applied first so portrait phone shots stay upright.
    """
    img = Image.open(io.BytesIO(image_bytes))
    img = ImageOps.exif_transpose(img)
    if img.mode != "RGB":
        img = img.convert("RGB")
    img.thumbnail((max_edge, max_edge), Image.LANCZOS)

    out = io.BytesIO()
    img.save(out, format="JPEG", quality=quality, optimize=True)
    return out.getvalue()


class ContentGenerator:

    def __init__(self, pricer: Optional[JewelryPricer] = None):
        self.pricer = pricer or JewelryPricer()

    def generate(self, inputs: dict, images: Optional[list] = None) -> dict:
        """
        Args:
            inputs: {
                "product_type": str,
                "metal_type": str,
                "metal_weight": float,           # grams
                "gems": [{"name": str, "carats": float}],
                "user_description": str,
            }
            images: raw image bytes, main image first

        Returns:
            ProductContent dict — see module docstring.
        """
        price = self.pricer.calculate(
            inputs.get("metal_type", ""),
            inputs.get("metal_weight") or 0.0,
            inputs.get("gems") or [],
        )

        encoded = []
        for raw in (images or [])[:MAX_IMAGES]:
            try:
                encoded.append(base64.b64encode(compress_image(raw)).decode("ascii"))
            except Exception as e:
                logger.warning("Skipping unreadable product image: %s", e)

        content = None
        source = "ai"
        if settings.GEMINI_API_KEY:
            try:
                text = self._call_gemini(self._build_prompt(inputs), encoded)
                content = self._parse_response(text)
            except Exception as e:
                logger.warning("Gemini content generation failed, using template copy: %s", e)
        else:
            logger.info("GEMINI_API_KEY not set — using template copy")

        if content is None:
            content = self._fallback_content(inputs)
            source = "template"

        return {
            **content,
            "price_usd": price["price_usd"],
            "price_inr": price["price_inr"],
            "source": source,
        }

    def _build_prompt(self, inputs: dict) -> str:
        gems = inputs.get("gems") or []
        gem_lines = [
            f"- {g.get('name', 'stone')}" + (f" ({g['carats']} ct)" if g.get("carats") else "")
            for g in gems
        ]
        lines = [
            "You write product copy for a luxury handcrafted jewelry brand.",
            f"Product type: {inputs.get('product_type') or 'Jewelry'}",
            f"Metal: {inputs.get('metal_type') or 'unspecified'}",
        ]
        if inputs.get("metal_weight"):
            lines.append(f"Metal weight: {inputs['metal_weight']} grams")
        if gem_lines:
            lines.append("Stones:")
            lines.extend(gem_lines)
        if inputs.get("user_description"):
            lines.append(f"Designer notes: {inputs['user_description']}")
        lines.append("")
        lines.append(
            "Return JSON with exactly these keys: title (max 8 words), tagline (one line), "
            "short_description (1-2 sentences), detailed_description (2-3 paragraphs), "
            "image_insights (what the photos show, empty string if no photos). "
            "Do not mention prices."
        )
        return "\n".join(lines)

    def _call_gemini(self, prompt: str, images_b64: list) -> str:
        """Call Gemini API. Raises on failure (caller handles fallback)."""
        url = (
            f"https://generativelanguage.googleapis.com/v1beta/models/"
            f"{settings.GEMINI_MODEL}:generateContent?key={settings.GEMINI_API_KEY}"
        )

        parts = [{"text": prompt}]
        for data in images_b64:
            parts.append({"inline_data": {"mime_type": "image/jpeg", "data": data}})

        payload = json.dumps({
            "contents": [{"parts": parts}],
            "generationConfig": {
                "temperature": 0.7,
                "responseMimeType": "application/json",
            },
        }).encode("utf-8")

        req = urllib.request.Request(
            url,
            data=payload,
            headers={"Content-Type": "application/json"},
            method="POST",
        )

        with urllib.request.urlopen(req, timeout=60) as response:
            result = json.loads(response.read())
            return result["candidates"][0]["content"]["parts"][0]["text"]

    def _parse_response(self, response_text: str) -> dict:
        """Keep only the expected string fields; title and description are required."""
        parsed = json.loads(response_text)

        # Unwrap {"product": {...}} style responses
        if isinstance(parsed, dict) and len(parsed) == 1:
            inner = next(iter(parsed.values()))
            if isinstance(inner, dict) and "title" in inner:
                parsed = inner

        content = {field: str(parsed.get(field) or "").strip() for field in CONTENT_FIELDS}
        if not content["title"] or not content["detailed_description"]:
            raise ValueError("AI response missing title or detailed_description")
        return content

    def _fallback_content(self, inputs: dict) -> dict:
        product_type = inputs.get("product_type") or "Jewelry Piece"
        metal = inputs.get("metal_type") or "Gold"
        gem_names = [g.get("name") for g in inputs.get("gems") or [] if g.get("name")]

        if gem_names:
            title = f"{gem_names[0]} {metal} {product_type}"
            stones = ", ".join(gem_names)
            short = f"A handcrafted {product_type.lower()} in {metal} set with {stones}."
        else:
            title = f"Classic {metal} {product_type}"
            short = f"A handcrafted {product_type.lower()} in {metal}."

        detailed = short + (
            " Each piece is made to order by our artisans, finished by hand and inspected "
            "before it leaves the workshop."
        )
        if inputs.get("user_description"):
            detailed += f"\n\n{inputs['user_description']}"

        return {
            "title": title,
            "tagline": f"Timeless {metal.lower()} craftsmanship",
            "short_description": short,
            "detailed_description": detailed,
            "image_insights": "",
        }
