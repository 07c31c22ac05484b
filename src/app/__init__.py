"""App: camada de resiliência e consistência do checkout.

Subpastas:
- bootstrap/: composition root (factories, inicialização, wiring por aba)
- sessions/: sessão de checkout com expiração
- cart/: carrinho persistido, sync entre abas e coordenação de mutações
- resilience/: rate limiting, backoff, retry e error boundary
- notifications/: toasts exibidos ao usuário
- infra/: implementações concretas de IO (storage, broadcast, HTTP, runtime)
- protocols/: contratos/interfaces
- domain/: modelos de domínio (cliente, item do carrinho)
- observability/: correlação e métricas

Padrão: app executa; fsm governa; config parametriza; utils apoia.
"""
