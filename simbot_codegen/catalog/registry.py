"""Static catalog data: pinned versions, framework dependencies, plugins,
selectable components and Spring Boot starters.

Pinned versions double as the fallback used when a release lookup fails.
"""

from __future__ import annotations

from simbot_codegen.models import (
    CatalogVersion,
    ComponentDescriptor,
    DependencyDescriptor,
    PluginDescriptor,
    SpringStarter,
)


SIMBOT_GROUP = "love.forte.simbot"
SIMBOT_COMPONENT_GROUP = "love.forte.simbot.component"
SPRING_BOOT_GROUP = "org.springframework.boot"
KTOR_GROUP = "io.ktor"

SIMBOT_OWNER = "simple-robot"
SIMBOT_REPO = "simpler-robot"

HANDLE_PACKAGE = "handle"
BOTS_FOLDER = "simbot-bots"

# Starters that keep the JVM alive on their own (a web server thread).
KEEP_ALIVE_DEPENDENCIES = frozenset({"spring-web", "spring-websocket"})


# ---------------------------------------------------------------------------
# Versions
# ---------------------------------------------------------------------------

SIMBOT_VERSION = CatalogVersion(ref="simbot", value="4.6.0")
KOTLIN_VERSION = CatalogVersion(ref="kotlin", value="2.1.20")
SPRING_VERSION = CatalogVersion(ref="spring", value="3.3.3")
SPRING_MANAGEMENT_VERSION = CatalogVersion(ref="spring-management", value="1.1.6")
KTOR_VERSION = CatalogVersion(ref="ktor", value="2.3.12")


# ---------------------------------------------------------------------------
# Framework dependencies
# ---------------------------------------------------------------------------

SIMBOT_CORE = DependencyDescriptor(
    name="simbot-core",
    group=SIMBOT_GROUP,
    artifact="simbot-core",
    version=SIMBOT_VERSION,
)

SIMBOT_SPRING = DependencyDescriptor(
    name="simbot-spring",
    group=SIMBOT_GROUP,
    artifact="simbot-core-spring-boot-starter",
    version=SIMBOT_VERSION,
)

SPRING_STARTER = DependencyDescriptor(
    name="spring-boot-starter",
    group=SPRING_BOOT_GROUP,
    artifact="spring-boot-starter",
)

KOTLIN_REFLECT = DependencyDescriptor(
    name="kotlin-reflect",
    group="org.jetbrains.kotlin",
    artifact="kotlin-reflect",
    version=KOTLIN_VERSION,
)

KTOR_CLIENT_JAVA = DependencyDescriptor(
    name="ktor-client-java",
    group=KTOR_GROUP,
    artifact="ktor-client-java",
    version=KTOR_VERSION,
    configuration="runtimeOnly",
)


# ---------------------------------------------------------------------------
# Plugins
# ---------------------------------------------------------------------------

PLUGIN_KOTLIN = PluginDescriptor(
    name="kotlin-jvm",
    id="org.jetbrains.kotlin.jvm",
    version=KOTLIN_VERSION,
)

PLUGIN_JAVA = PluginDescriptor(name="java", id="java", builtin=True)

PLUGIN_KOTLIN_SPRING = PluginDescriptor(
    name="kotlin-plugin-spring",
    id="org.jetbrains.kotlin.plugin.spring",
    version=KOTLIN_VERSION,
)

PLUGIN_SPRING = PluginDescriptor(
    name="spring",
    id="org.springframework.boot",
    version=SPRING_VERSION,
)

PLUGIN_SPRING_MANAGEMENT = PluginDescriptor(
    name="spring-management",
    id="io.spring.dependency-management",
    version=SPRING_MANAGEMENT_VERSION,
)


# ---------------------------------------------------------------------------
# Components
# ---------------------------------------------------------------------------

COMPONENTS: dict[str, ComponentDescriptor] = {
    "qq": ComponentDescriptor(
        component_id="qq",
        display="QQ机器人",
        owner=SIMBOT_OWNER,
        repo="simbot-component-qq-guild",
        requires_runtime_client=True,
        dependency=DependencyDescriptor(
            name="simbot-component-qq",
            group=SIMBOT_COMPONENT_GROUP,
            artifact="simbot-component-qq-guild-core",
            version=CatalogVersion(ref="simbot-qq", value="4.0.1"),
        ),
        config_component="simbot.qqguild",
        config_template="qq",
        message_event_class="love.forte.simbot.component.qguild.event.QGMessageEvent",
        install_function="love.forte.simbot.component.qguild.useQQGuild",
        component_class="love.forte.simbot.component.qguild.QQGuildComponent",
        doc="https://simbot.forte.love/component-qq-guild.html",
        bot_config_doc="https://simbot.forte.love/component-qq-guild-bot-config.html",
    ),
    "kook": ComponentDescriptor(
        component_id="kook",
        display="KOOK机器人",
        owner=SIMBOT_OWNER,
        repo="simbot-component-kook",
        requires_runtime_client=True,
        dependency=DependencyDescriptor(
            name="simbot-component-kook",
            group=SIMBOT_COMPONENT_GROUP,
            artifact="simbot-component-kook-core",
            version=CatalogVersion(ref="simbot-kook", value="4.0.2"),
        ),
        config_component="simbot.kook",
        config_template="kook",
        message_event_class="love.forte.simbot.component.kook.event.KookMessageEvent",
        install_function="love.forte.simbot.component.kook.useKook",
        component_class="love.forte.simbot.component.kook.KookComponent",
        doc="https://simbot.forte.love/component-kook.html",
        bot_config_doc="https://simbot.forte.love/component-kook-bot-config.html",
    ),
    "onebot": ComponentDescriptor(
        component_id="onebot",
        display="OneBot",
        owner=SIMBOT_OWNER,
        repo="simbot-component-onebot",
        requires_runtime_client=True,
        dependency=DependencyDescriptor(
            name="simbot-component-onebot",
            group=SIMBOT_COMPONENT_GROUP,
            artifact="simbot-component-onebot-v11-core",
            version=CatalogVersion(ref="simbot-onebot", value="1.4.0"),
        ),
        config_component="simbot.onebot11",
        config_template="onebot",
        message_event_class=(
            "love.forte.simbot.component.onebot.v11.core.event.message.OneBotMessageEvent"
        ),
        install_function="love.forte.simbot.component.onebot.v11.core.useOneBot11",
        component_class="love.forte.simbot.component.onebot.v11.core.component.OneBot11Component",
        doc="https://simbot.forte.love/component-onebot.html",
        bot_config_doc="https://simbot.forte.love/component-onebot-v11-bot-config.html",
    ),
}


# ---------------------------------------------------------------------------
# Spring Boot starters
# ---------------------------------------------------------------------------


def _starter(
    starter_id: str,
    name: str,
    group: str,
    artifact: str,
    configuration: str = "implementation",
) -> SpringStarter:
    return SpringStarter(
        starter_id=starter_id,
        dependency=DependencyDescriptor(
            name=name, group=group, artifact=artifact, configuration=configuration
        ),
    )


SPRING_STARTERS: dict[str, SpringStarter] = {
    starter.starter_id: starter
    for starter in (
        _starter("web", "spring-web", SPRING_BOOT_GROUP, "spring-boot-starter-web"),
        _starter("data-jdbc", "spring-data-jdbc", SPRING_BOOT_GROUP, "spring-boot-starter-data-jdbc"),
        _starter("data-jpa", "spring-data-jpa", SPRING_BOOT_GROUP, "spring-boot-starter-data-jpa"),
        _starter("data-jooq", "spring-data-jooq", SPRING_BOOT_GROUP, "spring-boot-starter-jooq"),
        _starter("mysql", "mysql-connector", "com.mysql", "mysql-connector-j", "runtimeOnly"),
        _starter("h2", "h2-database", "com.h2database", "h2", "runtimeOnly"),
        _starter("postgresql", "postgresql-driver", "org.postgresql", "postgresql", "runtimeOnly"),
        _starter("sqlserver", "mssql-jdbc", "com.microsoft.sqlserver", "mssql-jdbc", "runtimeOnly"),
        _starter("oracle", "oracle-jdbc", "com.oracle.database.jdbc", "ojdbc8", "runtimeOnly"),
        _starter("data-redis", "spring-data-redis", SPRING_BOOT_GROUP, "spring-boot-starter-data-redis"),
        _starter("data-mongodb", "spring-data-mongodb", SPRING_BOOT_GROUP, "spring-boot-starter-data-mongodb"),
        _starter(
            "data-elasticsearch",
            "spring-data-elasticsearch",
            SPRING_BOOT_GROUP,
            "spring-boot-starter-data-elasticsearch",
        ),
        _starter("websocket", "spring-websocket", SPRING_BOOT_GROUP, "spring-boot-starter-websocket"),
        _starter("amqp", "spring-amqp", SPRING_BOOT_GROUP, "spring-boot-starter-amqp"),
    )
}


def get_component(component_id: str) -> ComponentDescriptor:
    """Return the registered component, raising ``KeyError`` if unknown."""
    return COMPONENTS[component_id]
