#!/usr/bin/env python3
"""
Options Strategy Engine - Main Entry Point

Calculates an options strategy position (strikes, breakevens, max loss/profit)
for a symbol from live or saved market data.
"""

import sys
import argparse
from pathlib import Path
from dotenv import load_dotenv

from strategy_engine.config import ConfigManager
from strategy_engine.logging import EngineLogger
from strategy_engine.market_data import MarketDataClientFactory, MarketDataError
from strategy_engine.strategy import (
    LegacyCalculationInputs,
    MarketDataInput,
    StrategyCalculatorAdapter,
    StrategyError,
    StrategyFactory,
    StrategyResult,
)

# Load environment variables from .env file
load_dotenv()


def print_strategies(factory: StrategyFactory):
    """Print the strategy catalogue."""
    print("Available strategies:\n")
    for info in factory.get_strategy_info():
        params = info.parameters
        print(f"  {info.strategy_type.value:<20} {info.name}")
        print(f"  {'':<20} risk={params.risk_level.value}, complexity={params.complexity}, "
              f"optimal DTE={params.optimal_days_to_expiry}")


def print_result(result: StrategyResult):
    """Print a calculated position."""
    print(f"\n{result.strategy_type.value} on {result.symbol} @ ${result.underlying_price:.2f}")
    print(f"Expiration: {result.expiration_date.isoformat()} ({result.days_to_expiry} days)")
    print("\nLegs:")
    for leg in result.legs:
        expiration = leg.expiration_date.isoformat() if leg.expiration_date else ''
        print(f"  {leg.action.upper():<5} {leg.quantity}x {leg.option_type.upper():<4} "
              f"{leg.strike:>8.2f} @ ${leg.premium:.2f} {expiration}")
    print(f"\nBreakevens: ${result.lower_breakeven:.2f} - ${result.upper_breakeven:.2f}")
    print(f"Profit zone: ${result.profit_zone.lower:.2f} - ${result.profit_zone.upper:.2f}")
    print(f"Max loss:   {result.max_loss}")
    print(f"Max profit: {'Unlimited' if result.max_profit is None else f'${result.max_profit:.2f}'}")
    if result.net_debit is not None:
        print(f"Net debit:  ${result.net_debit:.2f} per share")
    if result.net_credit is not None:
        print(f"Net credit: ${result.net_credit:.2f} per share")
    iv_note = " (fallback)" if result.iv_is_fallback else ""
    print(f"IV: {result.implied_volatility:.1f}%{iv_note}, IV percentile: {result.iv_percentile:.0f}")
    print(f"Risk profile: {result.risk_profile.value}")
    if result.greeks:
        g = result.greeks
        print(f"Greeks: delta={g.delta:.3f} gamma={g.gamma:.4f} theta={g.theta:.3f} vega={g.vega:.3f}")


def main():
    """Main entry point for the strategy engine."""
    parser = argparse.ArgumentParser(
        description='Options Strategy Calculation Engine'
    )
    parser.add_argument(
        '--config',
        type=str,
        default='config/config.json',
        help='Path to configuration file (default: config/config.json)'
    )
    parser.add_argument(
        '--list',
        action='store_true',
        help='List available strategies and exit'
    )
    parser.add_argument('--strategy', type=str, help='Strategy to calculate (default from config)')
    parser.add_argument('--symbol', type=str, help='Underlying symbol')
    parser.add_argument('--price', type=float, help='Underlying price (fetched when omitted)')
    parser.add_argument('--expiration', type=str, help='Expiration date YYYY-MM-DD (default: next Friday)')
    parser.add_argument('--days', type=int, help='Days to expiry (default: derived from expiration)')
    parser.add_argument('--curve', action='store_true', help='Print the P&L curve at expiration')
    parser.add_argument('--portfolio-value', type=float, help='Print position sizing for this portfolio value')
    parser.add_argument(
        '--validate-only',
        action='store_true',
        help='Only check whether market data supports the strategy'
    )
    parser.add_argument(
        '--version',
        action='version',
        version='Options Strategy Engine v0.1.0'
    )

    args = parser.parse_args()

    if args.list:
        print_strategies(StrategyFactory())
        sys.exit(0)

    if not args.symbol:
        parser.error("--symbol is required unless --list is given")

    # Verify config file exists
    config_path = Path(args.config)
    if not config_path.exists():
        print(f"Error: Configuration file not found at {args.config}")
        print(f"Please create a configuration file or use --config to specify a different path")
        sys.exit(1)

    try:
        config = ConfigManager().load_config(str(config_path))
    except (ValueError, OSError) as e:
        print(f"ERROR: Failed to load configuration: {e}")
        sys.exit(1)

    logger = EngineLogger(config.logging_config)
    client = MarketDataClientFactory.from_config(config, logger)
    adapter = StrategyCalculatorAdapter(
        market_data_client=client,
        logger=logger,
        settings=config.calculator
    )
    strategy = args.strategy or config.default_strategy
    symbol = args.symbol.upper()

    try:
        current_price = args.price or client.get_stock_quote(symbol)

        if args.validate_only:
            chain = client.get_options_chain(symbol, current_price)
            validation = adapter.validate_strategy_data(
                strategy, MarketDataInput(symbol=symbol, current_price=current_price, options_chain=chain)
            )
            for error in validation.errors:
                print(f"ERROR: {error}")
            for warning in validation.warnings:
                print(f"WARNING: {warning}")
            print(f"{strategy} on {symbol}: {'valid' if validation.is_valid else 'invalid'}")
            sys.exit(0 if validation.is_valid else 1)

        result = adapter.calculate_strategy(LegacyCalculationInputs(
            strategy_type=strategy,
            current_price=current_price,
            symbol=symbol,
            expiration_date=args.expiration,
            days_to_expiry=args.days
        ))
    except (StrategyError, MarketDataError, ValueError) as e:
        print(f"\nERROR: {e}")
        sys.exit(1)

    print_result(result)

    if args.curve:
        print("\nP&L at expiration:")
        for point in adapter.calculate_pl_curve(strategy, result, current_price):
            print(f"  ${point.price:>9.2f}  {point.profit_loss:>10.2f}")

    if args.portfolio_value:
        sizing = adapter.get_recommended_position_size(strategy, args.portfolio_value)
        print(f"\nPosition sizing for ${args.portfolio_value:,.2f} portfolio:")
        print(f"  Recommended: ${sizing.recommended_size:,.2f}")
        print(f"  Maximum:     ${sizing.max_position_size:,.2f}")
        risk_percent = result.max_loss.percent_of(args.portfolio_value)
        risk = 'Unlimited' if risk_percent is None else f"{risk_percent:.2f}% of portfolio"
        print(f"  Max loss:    {risk}")
        print(f"  {sizing.reasoning}")


if __name__ == '__main__':
    main()
