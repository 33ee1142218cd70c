"""
Instruction templates sent upstream.
The model follows literal, detailed instructions better than short hints, so the
user's text is always wrapped in one of these templates.
"""

# Both fragments must occur in an edit instruction to switch to selective text removal.
TEXT_TOKEN = "文字"
DELETE_TOKEN = "削除"

OVERLAY_DEFINITION = "オーバーレイされたテキスト（画像上に重ねて表示された文字）"

PRESERVE_PRINTED_TEXT = (
    "商品のラベル、パッケージ、ボトルに印刷されているブランド名、商品名、ロゴ、成分表示、"
    "使用方法、容量表示、製造元情報など、商品に直接印刷・記載されている全ての文字は保持してください。"
)

PRESERVE_PRODUCT = (
    "商品の形状、色、質感、ラベルデザインは一切変更せず、"
    "オーバーレイテキストが表示されていた部分のみを自然に補完してください。"
)

SINGLE_SCENE = "各画像は独立した1つのシーンのみを含み、複数のシーンを1つの画像にまとめないでください。"

VARIATIONS = "{count}つの異なるバリエーションで高品質な画像を生成してください。"

TEXT_REMOVAL = (
    "{instruction} 重要：" + OVERLAY_DEFINITION + "のみを削除し、"
    + PRESERVE_PRINTED_TEXT + PRESERVE_PRODUCT + SINGLE_SCENE + VARIATIONS
)

EDIT = (
    "この画像を「{instruction}」という指示で編集してください。" + VARIATIONS
    + "広告用途に適しており、指示を忠実に反映したものにしてください。"
)

TEXT_ONLY = (
    "この画像から文字部分のみを抽出し、背景を完全に透明にしてください。"
    "文字の形状、フォント、色は一切変更せず、そのまま保持してください。"
    "透明な背景のPNG形式で生成してください。"
)

GENERATE = (
    "「{description}」という内容の画像を{count}枚生成してください。"
    "高品質で創造的で魅力的な画像にしてください。"
    "各画像は異なるアプローチや視点で作成してください。"
)

COMBINED_BASE = (
    "この商品画像から" + OVERLAY_DEFINITION + "のみを削除してください。"
    + PRESERVE_PRINTED_TEXT + PRESERVE_PRODUCT + SINGLE_SCENE
)

COMBINED_BACKGROUND = " 背景は「{background}」に変更してください。"
COMBINED_DEFAULT_BACKGROUND = " 背景は商品に合った自然な背景に変更してください。"


def is_text_removal_instruction(instruction: str) -> bool:
    return TEXT_TOKEN in instruction and DELETE_TOKEN in instruction
