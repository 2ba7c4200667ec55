"""
Internationalization (i18n) module for the domain portfolio tracker.

Provides translations for all user-facing CLI messages in English (en)
and Chinese (zh).
"""

from typing import Optional


SUPPORTED_LANGUAGES = frozenset({"en", "zh"})
DEFAULT_LANGUAGE = "en"


# Structure: {message_key: {language_code: translated_message}}
TRANSLATIONS: dict[str, dict[str, str]] = {
    # Ownership status
    "status.OWNED": {
        "en": "Owned",
        "zh": "已拥有",
    },
    "status.BACKORDER": {
        "en": "Backorder",
        "zh": "抢注中",
    },
    "status.WATCHLIST": {
        "en": "Watchlist",
        "zh": "关注列表",
    },
    "status.EXPIRED": {
        "en": "Expired",
        "zh": "已过期",
    },

    # Refresh outcome shown per record
    "update.success": {
        "en": "OK",
        "zh": "成功",
    },
    "update.manual_check": {
        "en": "Manual check",
        "zh": "需手动检查",
    },
    "update.never": {
        "en": "Never",
        "zh": "从未更新",
    },

    # Record fields
    "field.name": {
        "en": "Domain",
        "zh": "域名",
    },
    "field.status": {
        "en": "Status",
        "zh": "状态",
    },
    "field.registrar": {
        "en": "Registrar",
        "zh": "注册商",
    },
    "field.registration_date": {
        "en": "Registered",
        "zh": "注册时间",
    },
    "field.expiration_date": {
        "en": "Expires",
        "zh": "过期时间",
    },
    "field.notes": {
        "en": "Notes",
        "zh": "备注",
    },
    "field.added_at": {
        "en": "Added",
        "zh": "添加时间",
    },
    "field.last_updated": {
        "en": "Last updated",
        "zh": "最后更新",
    },
    "field.update_status": {
        "en": "Update status",
        "zh": "更新状态",
    },

    # Statistics
    "stats.total": {
        "en": "Total domains",
        "zh": "域名总数",
    },
    "stats.owned": {
        "en": "Owned",
        "zh": "已拥有",
    },
    "stats.backorder": {
        "en": "Backorder",
        "zh": "抢注中",
    },
    "stats.expiring_soon": {
        "en": "Expiring soon (30 days)",
        "zh": "即将过期 (30天)",
    },

    # CLI messages
    "cli.added": {
        "en": "Added {count} domain(s).",
        "zh": "已添加 {count} 个域名。",
    },
    "cli.skipped_duplicates": {
        "en": "Skipped {count} duplicate domain(s).",
        "zh": "已跳过 {count} 个重复域名。",
    },
    "cli.invalid_name": {
        "en": "Invalid domain name '{name}': {error}",
        "zh": "无效的域名 '{name}'：{error}",
    },
    "cli.read_failed": {
        "en": "Could not read {path}: {error}",
        "zh": "无法读取 {path}：{error}",
    },
    "cli.no_domains": {
        "en": "No domains tracked yet.",
        "zh": "暂无域名。",
    },
    "cli.not_tracked": {
        "en": "Domain not tracked: {domain}",
        "zh": "未找到域名：{domain}",
    },
    "cli.removed": {
        "en": "Removed {domain}.",
        "zh": "已删除 {domain}。",
    },
    "cli.updated": {
        "en": "Updated {domain}.",
        "zh": "已更新 {domain}。",
    },
    "cli.nothing_changed": {
        "en": "Nothing to change.",
        "zh": "没有需要修改的内容。",
    },
    "cli.updating": {
        "en": "Updating {current}/{total} ({domain})",
        "zh": "更新中 ({current}/{total}) {domain}",
    },
    "cli.refresh_done": {
        "en": "Refreshed {count} domain(s), {manual} need a manual check.",
        "zh": "已更新 {count} 个域名，其中 {manual} 个需手动检查。",
    },
    "cli.refresh_failed": {
        "en": "An error occurred during the update: {error}",
        "zh": "更新过程中发生错误：{error}",
    },
    "cli.refresh_interrupted": {
        "en": "Update interrupted; {count} domain(s) were already saved.",
        "zh": "更新已中断；已保存 {count} 个域名。",
    },

    # Errors
    "error.persistence": {
        "en": "Could not access the domain store: {error}",
        "zh": "无法访问域名存储：{error}",
    },
    "error.config": {
        "en": "Configuration error: {error}",
        "zh": "配置错误：{error}",
    },
    "error.validation": {
        "en": "Invalid value: {error}",
        "zh": "无效的值：{error}",
    },

    # Config command
    "config.created": {
        "en": "Configuration created at: {path}",
        "zh": "配置已创建：{path}",
    },
    "config.exists": {
        "en": "Configuration already exists at: {path} (use --force to overwrite)",
        "zh": "配置已存在：{path}（使用 --force 覆盖）",
    },
    "config.missing": {
        "en": "No configuration found at: {path}",
        "zh": "未找到配置：{path}",
    },
    "config.valid": {
        "en": "Configuration at {path} is valid.",
        "zh": "配置 {path} 有效。",
    },
}


def get_message(
    key: str,
    language: Optional[str] = None,
    **kwargs,
) -> str:
    """
    Get a translated message by key.

    Args:
        key: The message key (e.g., 'cli.added')
        language: Language code ('en' or 'zh'). Defaults to DEFAULT_LANGUAGE.
        **kwargs: Format arguments for the message template

    Returns:
        The translated and formatted message string.
        If the key is not found, returns the key itself.
        If the language is not found, falls back to DEFAULT_LANGUAGE.

    Examples:
        >>> get_message('status.OWNED', 'en')
        'Owned'
        >>> get_message('cli.added', 'zh', count=3)
        '已添加 3 个域名。'
    """
    if language is None or language not in SUPPORTED_LANGUAGES:
        language = DEFAULT_LANGUAGE

    translations = TRANSLATIONS.get(key)
    if translations is None:
        return key

    message = translations.get(language) or translations.get(DEFAULT_LANGUAGE)
    if message is None:
        return key

    if kwargs:
        try:
            message = message.format(**kwargs)
        except KeyError:
            # Missing format argument: show the template rather than fail
            pass

    return message


def get_all_message_keys() -> set[str]:
    return set(TRANSLATIONS.keys())


def has_translation(key: str, language: str) -> bool:
    translations = TRANSLATIONS.get(key)
    if translations is None:
        return False
    return language in translations


def get_missing_translations(language: str) -> set[str]:
    """Message keys that have no translation for ``language``."""
    return {
        key for key, translations in TRANSLATIONS.items()
        if language not in translations
    }


def validate_translations() -> dict[str, set[str]]:
    """
    Validate that all languages have all translations.

    Returns:
        Dictionary mapping language codes to sets of missing message keys.
        Empty sets indicate complete translations.
    """
    return {
        language: get_missing_translations(language)
        for language in SUPPORTED_LANGUAGES
    }
